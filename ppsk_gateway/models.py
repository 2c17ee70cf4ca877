"""Controller payload models.

The controller returns loosely typed JSON. These models pin down the
fields the gateway reads and keep every other field as an extra so a WLAN
written back by full-object replace is byte-for-byte what was fetched,
plus the local mutation.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _dump_as_received(model: BaseModel) -> Dict[str, Any]:
    # Fields the controller sent (or we assigned), under their wire names,
    # plus every extra field as-is
    payload = model.model_dump(by_alias=True, exclude_unset=True)
    payload.update(model.model_extra or {})
    return payload


class PpskEntry(BaseModel):
    """A private pre-shared key bound to one WLAN."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    password: str = ""
    networkconf_id: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return _dump_as_received(self)


class WlanConfig(BaseModel):
    """WLAN configuration snapshot (rest/wlanconf)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(default="", alias="_id")
    name: Optional[str] = None
    networkconf_id: Optional[str] = None
    private_preshared_keys: List[PpskEntry] = Field(default_factory=list)

    @field_validator("private_preshared_keys", mode="before")
    @classmethod
    def _keys_or_empty(cls, value: Any) -> Any:
        # Controllers send null or omit the field on WLANs without PPSK
        return value if isinstance(value, list) else []

    def has_password(self, password: str) -> bool:
        return any(k.password == password for k in self.private_preshared_keys)

    def to_payload(self) -> Dict[str, Any]:
        """Serialize for a full-object replace, keeping controller field names."""
        payload = _dump_as_received(self)
        if "private_preshared_keys" in self.model_fields_set:
            payload["private_preshared_keys"] = [k.to_payload() for k in self.private_preshared_keys]
        return payload


class ClientRecord(BaseModel):
    """Known client (list/user)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = Field(default=None, alias="_id")
    mac: Optional[str] = None
    name: Optional[str] = None
    hostname: Optional[str] = None
    note: Optional[str] = None
    last_ip: Optional[str] = None
    ip: Optional[str] = None

    @field_validator("mac")
    @classmethod
    def _lower_mac(cls, value: Optional[str]) -> Optional[str]:
        return value.strip().lower() if value else value

    def summary(self) -> Dict[str, Optional[str]]:
        """Normalized view returned to callers."""
        return {
            "id": self.id,
            "mac": self.mac,
            "ip": self.last_ip if self.last_ip is not None else self.ip,
            "name": self.name,
            "hostname": self.hostname,
            "note": self.note,
        }
