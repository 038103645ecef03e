"""Route 53 handles: hosted zones, record sets and change batches."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog

from cloudherd.core.errors import require
from cloudherd.utils import at_most_one, is_address_literal, normalize_fqdn

logger = structlog.get_logger()


class RecordType(str, Enum):
    A = "A"
    CNAME = "CNAME"


class ChangeStatus(str, Enum):
    PENDING = "PENDING"
    INSYNC = "INSYNC"


def classify(value: str) -> RecordType:
    """Pick the record type for a target: A for address literals, CNAME otherwise."""
    return RecordType.A if is_address_literal(value) else RecordType.CNAME


@dataclass(frozen=True)
class DnsRecord:
    name: str
    type: RecordType | str
    value: str
    zone_id: str | None = None
    ttl: int | None = None
    raw: dict[str, Any] | None = field(default=None, compare=False, repr=False)

    @classmethod
    def from_record_set(cls, record_set: dict[str, Any], zone_id: str | None = None) -> DnsRecord:
        values = [item["Value"] for item in record_set.get("ResourceRecords", [])]
        alias = record_set.get("AliasTarget") or {}
        value = values[0] if values else normalize_fqdn(alias.get("DNSName", ""))
        record_type = record_set["Type"]
        return cls(
            name=normalize_fqdn(record_set["Name"]),
            type=RecordType(record_type) if record_type in RecordType.__members__ else record_type,
            value=value,
            zone_id=zone_id,
            ttl=record_set.get("TTL"),
            raw=record_set,
        )

    def to_record_set(self, ttl: int) -> dict[str, Any]:
        record_type = self.type.value if isinstance(self.type, RecordType) else self.type
        return {
            "Name": self.name,
            "Type": record_type,
            "TTL": ttl,
            "ResourceRecords": [{"Value": self.value}],
        }


class DnsChange:
    """A submitted change batch and its propagation status."""

    def __init__(self, route53: Any, change_info: dict[str, Any]) -> None:
        self._route53 = route53
        self._info = change_info

    @property
    def id(self) -> str:
        return self._info["Id"]

    @property
    def status(self) -> ChangeStatus:
        return ChangeStatus(self._info["Status"])

    @property
    def is_in_sync(self) -> bool:
        return self.status is ChangeStatus.INSYNC

    def reload(self) -> DnsChange:
        response = self._route53.get_change(Id=self.id)
        return DnsChange(self._route53, response["ChangeInfo"])

    def __repr__(self) -> str:
        return f"DnsChange(id={self.id!r}, status={self.status.value!r})"


def list_hosted_zones(route53: Any) -> list[dict[str, Any]]:
    zones: list[dict[str, Any]] = []
    request: dict[str, Any] = {}
    while True:
        response = route53.list_hosted_zones(**request)
        zones.extend(response.get("HostedZones", []))
        if not response.get("IsTruncated"):
            return zones
        request["Marker"] = response["NextMarker"]


class HostedZone:
    def __init__(self, route53: Any, description: dict[str, Any]) -> None:
        self._route53 = route53
        self._description = description

    @property
    def id(self) -> str:
        return self._description["Id"]

    @property
    def name(self) -> str:
        return self._description["Name"]

    @property
    def domain(self) -> str:
        return normalize_fqdn(self.name)

    @property
    def is_private(self) -> bool:
        return bool(self._description.get("Config", {}).get("PrivateZone", False))

    def list_records(
        self,
        start_name: str,
        *,
        start_type: RecordType | str | None = None,
        max_items: int = 1,
    ) -> list[DnsRecord]:
        request: dict[str, Any] = {
            "HostedZoneId": self.id,
            "StartRecordName": start_name,
            "MaxItems": str(max_items),
        }
        if start_type is not None:
            request["StartRecordType"] = (
                start_type.value if isinstance(start_type, RecordType) else start_type
            )
        response = self._route53.list_resource_record_sets(**request)
        return [
            DnsRecord.from_record_set(record_set, zone_id=self.id)
            for record_set in response.get("ResourceRecordSets", [])
        ]

    def find_record(
        self,
        name: str,
        *,
        record_type: RecordType | str | None = None,
    ) -> DnsRecord | None:
        """Return the record set named exactly ``name``, or None.

        The listing starts at ``name`` and so may return a lexically later
        record; only an exact match after trailing-dot normalisation counts.
        """
        key = normalize_fqdn(require(name, "DNS name"))
        matches = [
            record
            for record in self.list_records(key, start_type=record_type)
            if record.name == key
        ]
        return at_most_one(matches, f"DNS record {key}")

    def _submit(self, action: str, record_set: dict[str, Any]) -> DnsChange:
        response = self._route53.change_resource_record_sets(
            HostedZoneId=self.id,
            ChangeBatch={"Changes": [{"Action": action, "ResourceRecordSet": record_set}]},
        )
        change = DnsChange(self._route53, response["ChangeInfo"])
        logger.info(
            "dns_change_submitted",
            action=action,
            zone_id=self.id,
            name=record_set["Name"],
            change_id=change.id,
        )
        return change

    def upsert(self, record: DnsRecord, ttl: int) -> DnsChange:
        return self._submit("UPSERT", record.to_record_set(ttl))

    def delete(self, record: DnsRecord) -> DnsChange:
        # Deletion must echo the record set exactly as stored.
        record_set = record.raw or record.to_record_set(record.ttl or 300)
        return self._submit("DELETE", record_set)

    def __str__(self) -> str:
        return self.domain
