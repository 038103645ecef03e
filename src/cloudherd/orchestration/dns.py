"""DNS workflows: upsert-and-confirm, lookup and delete."""

from __future__ import annotations

from typing import Any

from cloudherd.config.settings import Settings, get_settings
from cloudherd.core.errors import PreconditionViolation, require
from cloudherd.logging import bind_context
from cloudherd.poller import await_condition
from cloudherd.resources.dns import DnsChange, DnsRecord, HostedZone, classify, list_hosted_zones
from cloudherd.utils import exactly_one, normalize_fqdn, zone_domain


class DnsWorkflows:
    def __init__(self, route53: Any, settings: Settings | None = None) -> None:
        self._route53 = route53
        self._settings = settings or get_settings()

    def list_zones(self) -> list[HostedZone]:
        return [HostedZone(self._route53, zone) for zone in list_hosted_zones(self._route53)]

    def find_zone(self, name: str) -> HostedZone:
        """The hosted zone whose domain is the last two labels of ``name``."""
        domain = zone_domain(require(name, "DNS name"))
        return exactly_one(
            [zone for zone in self.list_zones() if zone.domain == domain],
            f"hosted zone for {domain}",
        )

    def await_in_sync(self, change: DnsChange, *, timeout: float | None = None) -> DnsChange:
        latest = [change]

        def in_sync() -> bool:
            latest[0] = latest[0].reload()
            return latest[0].is_in_sync

        await_condition(
            in_sync,
            interval=self._settings.dns_poll_interval,
            timeout=self._settings.dns_sync_timeout if timeout is None else timeout,
            label=f"DNS change {change.id} in sync",
        )
        return latest[0]

    def upsert_record(self, name: str, value: str, *, wait_for_sync: bool = False) -> DnsChange:
        """
        Point ``name`` at ``value``, creating or replacing the record.

        Address literals get an A record, anything else a CNAME. With
        ``wait_for_sync`` the call returns once the change has propagated.
        """
        key = normalize_fqdn(require(name, "DNS name"))
        value = require(value, "DNS value")
        record_type = classify(value)

        zone = self.find_zone(key)
        log = bind_context(workflow="dns_upsert", zone_id=zone.id, name=key)
        record = DnsRecord(name=key, type=record_type, value=value, zone_id=zone.id)
        change = zone.upsert(record, ttl=self._settings.dns_ttl)
        log.info("dns_record_upserted", type=record_type.value, value=value, change_id=change.id)

        if wait_for_sync:
            change = self.await_in_sync(change)
            log.info("dns_change_in_sync", change_id=change.id)
        return change

    def get_record(self, name: str) -> DnsRecord | None:
        key = normalize_fqdn(require(name, "DNS name"))
        return self.find_zone(key).find_record(key)

    def record_exists(self, name: str) -> bool:
        return self.get_record(name) is not None

    def delete_record(self, name: str, *, wait_for_sync: bool = False) -> DnsChange:
        """
        Delete the record set named ``name``.

        Raises:
            PreconditionViolation: No record set has exactly that name
        """
        key = normalize_fqdn(require(name, "DNS name"))
        zone = self.find_zone(key)
        record = zone.find_record(key)
        if record is None:
            raise PreconditionViolation(f"DNS record {key} not found", {"name": key})

        change = zone.delete(record)
        bind_context(workflow="dns_delete", zone_id=zone.id, name=key).info(
            "dns_record_deleted", change_id=change.id
        )
        if wait_for_sync:
            change = self.await_in_sync(change)
        return change
