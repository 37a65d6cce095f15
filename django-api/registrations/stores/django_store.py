"""Django ORM implementation of the RegistrationStore."""

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from django.db import DatabaseError, transaction
from django.db.models import Prefetch, QuerySet

from registrations import models as orm
from registrations.domain import (
    Capacity,
    Child,
    ChildId,
    Event,
    EventId,
    Guardian,
    GuardianId,
    GuardianRole,
    RegisteredChild,
    RegisteredUser,
    Waiver,
    WaiverId,
    WaiverType,
)
from registrations.domain.errors import DatastoreError
from registrations.stores.interfaces import RegistrationStore

logger = logging.getLogger(__name__)


class DjangoRegistrationStore(RegistrationStore):
    """PostgreSQL-backed registration store using Django ORM."""

    @contextmanager
    def atomic(self) -> Iterator[None]:
        try:
            with transaction.atomic():
                yield
        except DatabaseError as exc:
            logger.exception("Transaction rolled back")
            raise DatastoreError() from exc

    def get_event(self, event_id: EventId, *, for_update: bool = False) -> Event | None:
        queryset = orm.Event.objects.prefetch_related(
            "registered_users__waivers_signed",
            "registered_children__waivers_signed",
        )
        if for_update:
            queryset = queryset.select_for_update()
        row = queryset.filter(pk=event_id.value).first()
        return _event_to_domain(row) if row else None

    def get_guardian(self, guardian_id: GuardianId, *, for_update: bool = False) -> Guardian | None:
        return self._first_guardian(_guardians(for_update).filter(pk=guardian_id.value))

    def get_guardian_by_auth_id(self, auth_id: str) -> Guardian | None:
        return self._first_guardian(_guardians().filter(auth_id=auth_id))

    def get_guardian_for_child(self, child_id: ChildId, *, for_update: bool = False) -> Guardian | None:
        return self._first_guardian(_guardians(for_update).filter(children__id=child_id.value))

    def save_roster(self, event: Event, guardian: Guardian) -> None:
        self._sync_users(event)
        self._sync_children(event)

        row = orm.Guardian.objects.get(pk=guardian.id.value)
        row.registered_events.set([e.value for e in guardian.registered_events])
        row.waivers_signed.set([w.value for w in guardian.waivers_signed])
        for child in guardian.children:
            child_row = orm.Child.objects.get(pk=child.id.value, guardian=row)
            child_row.registered_events.set([e.value for e in child.registered_events])
            child_row.waivers_signed.set([w.value for w in child.waivers_signed])

    def get_waiver(self, waiver_id: WaiverId) -> Waiver | None:
        row = orm.Waiver.objects.filter(pk=waiver_id.value).first()
        return _waiver_to_domain(row) if row else None

    def list_template_waivers(self, event_id: EventId) -> list[Waiver]:
        rows = orm.Waiver.objects.filter(event_id=event_id.value, type=orm.Waiver.Type.TEMPLATE)
        return [_waiver_to_domain(row) for row in rows]

    def find_completed_waiver(
        self,
        event_id: EventId,
        template_id: WaiverId,
        guardian_id: GuardianId,
        child_id: ChildId | None,
    ) -> Waiver | None:
        row = (
            _completed(guardian_id, child_id)
            .filter(event_id=event_id.value, template_id=template_id.value)
            .first()
        )
        return _waiver_to_domain(row) if row else None

    def list_completed_waivers(
        self,
        guardian_id: GuardianId,
        child_id: ChildId | None,
        event_id: EventId | None = None,
    ) -> list[Waiver]:
        rows = _completed(guardian_id, child_id)
        if event_id is not None:
            rows = rows.filter(event_id=event_id.value)
        return [_waiver_to_domain(row) for row in rows.order_by("-uploaded_at")]

    def save_waiver(self, waiver: Waiver) -> None:
        orm.Waiver.objects.update_or_create(
            pk=waiver.id.value,
            defaults={
                "file_key": waiver.file_key,
                "file_name": waiver.file_name,
                "type": waiver.type.value,
                "layout": waiver.layout,
                "uploaded_by_id": waiver.uploaded_by.value,
                "belongs_to_id": waiver.belongs_to.value,
                "child_id": waiver.child_id.value if waiver.child_id else None,
                "is_for_child": waiver.is_for_child,
                "template_id": waiver.template_id.value if waiver.template_id else None,
                "event_id": waiver.event_id.value if waiver.event_id else None,
                "uploaded_at": waiver.uploaded_at,
            },
        )

    def delete_waivers(self, waiver_ids: Iterable[WaiverId]) -> None:
        orm.Waiver.objects.filter(pk__in=[w.value for w in waiver_ids]).delete()

    def delete_child(self, guardian_id: GuardianId, child_id: ChildId) -> None:
        orm.Child.objects.filter(pk=child_id.value, guardian_id=guardian_id.value).delete()

    def delete_guardian(self, guardian_id: GuardianId) -> None:
        orm.Guardian.objects.filter(pk=guardian_id.value).delete()

    def _first_guardian(self, queryset: QuerySet) -> Guardian | None:
        row = queryset.first()
        return _guardian_to_domain(row) if row else None

    def _sync_users(self, event: Event) -> None:
        wanted = {ru.guardian_id.value: ru for ru in event.registered_users}
        rows = orm.RegisteredUser.objects.filter(event_id=event.id.value)
        rows.exclude(guardian_id__in=list(wanted)).delete()
        for guardian_id, entry in wanted.items():
            row, _ = orm.RegisteredUser.objects.get_or_create(event_id=event.id.value, guardian_id=guardian_id)
            row.waivers_signed.set([w.value for w in entry.waivers_signed])

    def _sync_children(self, event: Event) -> None:
        wanted = {rc.child_id.value: rc for rc in event.registered_children}
        rows = orm.RegisteredChild.objects.filter(event_id=event.id.value)
        rows.exclude(child_id__in=list(wanted)).delete()
        for child_id, entry in wanted.items():
            row, _ = orm.RegisteredChild.objects.get_or_create(
                event_id=event.id.value,
                child_id=child_id,
                defaults={"guardian_id": entry.guardian_id.value},
            )
            row.waivers_signed.set([w.value for w in entry.waivers_signed])


def _guardians(for_update: bool = False) -> QuerySet:
    queryset = orm.Guardian.objects.prefetch_related(
        "registered_events",
        "waivers_signed",
        Prefetch(
            "children",
            queryset=orm.Child.objects.prefetch_related("registered_events", "waivers_signed"),
        ),
    )
    if for_update:
        # lock only the guardian row, not the joined child rows
        queryset = queryset.select_for_update(of=("self",))
    return queryset


def _completed(guardian_id: GuardianId, child_id: ChildId | None) -> QuerySet:
    rows = orm.Waiver.objects.filter(type=orm.Waiver.Type.COMPLETED, belongs_to_id=guardian_id.value)
    if child_id is None:
        return rows.filter(is_for_child=False)
    return rows.filter(is_for_child=True, child_id=child_id.value)


def _event_to_domain(row: orm.Event) -> Event:
    return Event(
        id=EventId(row.id),
        title=row.title,
        capacity=Capacity(row.capacity),
        registration_deadline=row.registration_deadline,
        start_date=row.start_date,
        end_date=row.end_date,
        registered_users=tuple(
            RegisteredUser(
                guardian_id=GuardianId(ru.guardian_id),
                waivers_signed=frozenset(WaiverId(w.id) for w in ru.waivers_signed.all()),
            )
            for ru in row.registered_users.all()
        ),
        registered_children=tuple(
            RegisteredChild(
                guardian_id=GuardianId(rc.guardian_id),
                child_id=ChildId(rc.child_id),
                waivers_signed=frozenset(WaiverId(w.id) for w in rc.waivers_signed.all()),
            )
            for rc in row.registered_children.all()
        ),
    )


def _guardian_to_domain(row: orm.Guardian) -> Guardian:
    return Guardian(
        id=GuardianId(row.id),
        auth_id=row.auth_id,
        first_name=row.first_name,
        last_name=row.last_name,
        email=row.email,
        role=GuardianRole(row.role),
        children=tuple(
            Child(
                id=ChildId(child.id),
                first_name=child.first_name,
                last_name=child.last_name,
                registered_events=frozenset(EventId(e.id) for e in child.registered_events.all()),
                waivers_signed=frozenset(WaiverId(w.id) for w in child.waivers_signed.all()),
            )
            for child in row.children.all()
        ),
        registered_events=frozenset(EventId(e.id) for e in row.registered_events.all()),
        waivers_signed=frozenset(WaiverId(w.id) for w in row.waivers_signed.all()),
    )


def _waiver_to_domain(row: orm.Waiver) -> Waiver:
    return Waiver(
        id=WaiverId(row.id),
        file_key=row.file_key,
        file_name=row.file_name,
        type=WaiverType(row.type),
        uploaded_by=GuardianId(row.uploaded_by_id),
        belongs_to=GuardianId(row.belongs_to_id),
        uploaded_at=row.uploaded_at,
        child_id=ChildId(row.child_id) if row.child_id else None,
        template_id=WaiverId(row.template_id) if row.template_id else None,
        event_id=EventId(row.event_id) if row.event_id else None,
        layout=row.layout,
    )
