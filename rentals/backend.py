"""
Data access for the rentals tables.

Views and forms never query the ORM themselves: they are handed a
``TableBackend`` and read/write rows through it by table name. ``OrmBackend``
talks to the configured database and file storage; ``MemoryBackend`` keeps
rows in process and records every write, which is what the tests use.

Rows are plain dicts keyed by column name (foreign keys appear as
``property_id`` / ``tenant_id``). Embedded relations appear under the
relation name, e.g. ``lease["tenant"]``.
"""
import copy
import logging
from collections import namedtuple
from itertools import count

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.files.storage import default_storage
from django.db import DatabaseError, transaction
from django.utils import timezone
from django.utils.module_loading import import_string

from .models import Lease, MaintenanceRequest, Property, Tenant

logger = logging.getLogger(__name__)

TABLES = {
    "properties": Property,
    "tenants": Tenant,
    "leases": Lease,
    "maintenance_requests": MaintenanceRequest,
}

# relation name -> (foreign key column, target table)
RELATIONS = {
    "leases": {
        "property": ("property_id", "properties"),
        "tenant": ("tenant_id", "tenants"),
    },
    "maintenance_requests": {
        "property": ("property_id", "properties"),
    },
}

Write = namedtuple("Write", ["operation", "table", "payload", "pk"])


class BackendError(Exception):
    """A read, write or upload against the backend failed."""


def _model_for(table):
    try:
        return TABLES[table]
    except KeyError:
        raise BackendError(f"Unknown table: {table}") from None


def table_columns(table):
    return [field.attname for field in _model_for(table)._meta.concrete_fields]


class TableBackend:
    """
    Table-level read/write capability.

    Subclasses implement ``_fetch``, ``_insert``, ``_update``, ``upload`` and
    ``public_url``; projection, relation embedding and column checks live here
    so both implementations answer the same way.
    """

    def select(
        self,
        table,
        columns=None,
        *,
        eq=None,
        gte=None,
        order_by=None,
        descending=False,
        limit=None,
        embed=None,
    ):
        filters = [(column, "eq", value) for column, value in (eq or {}).items()]
        filters += [(column, "gte", value) for column, value in (gte or {}).items()]

        referenced = [column for column, _, _ in filters] + list(columns or [])
        if order_by:
            referenced.append(order_by)
        self._check_columns(table, referenced)

        rows = self._fetch(table, filters, order_by=order_by, descending=descending, limit=limit)
        if embed:
            rows = self._embed(table, rows, embed)
        if columns:
            keep = list(columns) + list(embed or {})
            rows = [{key: row[key] for key in keep} for row in rows]
        return rows

    def get(self, table, pk, columns=None):
        rows = self.select(table, columns, eq={"id": pk}, limit=1)
        return rows[0] if rows else None

    def insert(self, table, rows):
        if isinstance(rows, dict):
            rows = [rows]
        rows = [dict(row) for row in rows]
        for row in rows:
            self._check_columns(table, row)
            self._check_foreign_keys(table, row)
        return self._insert(table, rows)

    def update(self, table, values, pk):
        values = dict(values)
        self._check_columns(table, values)
        self._check_foreign_keys(table, values)
        return self._update(table, values, pk)

    def upload(self, bucket, path, content):
        raise NotImplementedError

    def public_url(self, bucket, path):
        raise NotImplementedError

    def _fetch(self, table, filters, order_by=None, descending=False, limit=None):
        raise NotImplementedError

    def _insert(self, table, rows):
        raise NotImplementedError

    def _update(self, table, values, pk):
        raise NotImplementedError

    def _check_columns(self, table, columns):
        known = table_columns(table)
        unknown = [column for column in columns if column not in known]
        if unknown:
            raise BackendError(f"Unknown column(s) for {table}: {', '.join(unknown)}")

    def _check_foreign_keys(self, table, row):
        # Checked up front: database constraints may be deferred to commit
        for fk_column, target in RELATIONS.get(table, {}).values():
            if row.get(fk_column) is None:
                continue
            if not self._fetch(target, [("id", "eq", row[fk_column])], limit=1):
                raise BackendError(
                    f"{table}.{fk_column}={row[fk_column]!r} does not reference a row in {target}"
                )

    def _embed(self, table, rows, embed):
        relations = RELATIONS.get(table, {})
        for name, columns in embed.items():
            if name not in relations:
                raise BackendError(f"{table} has no relation {name!r}")
            fk_column, target = relations[name]
            if columns:
                self._check_columns(target, columns)

            ids = sorted({row[fk_column] for row in rows if row.get(fk_column) is not None})
            related = {}
            if ids:
                for related_row in self._fetch(target, [("id", "in", ids)]):
                    related[related_row["id"]] = related_row

            for row in rows:
                match = related.get(row.get(fk_column))
                if match is not None:
                    match = {key: match[key] for key in columns} if columns else dict(match)
                row[name] = match
        return rows


class OrmBackend(TableBackend):
    """Backend over the Django database connection and file storage."""

    def __init__(self, storage=None):
        self.storage = storage or default_storage

    def _fetch(self, table, filters, order_by=None, descending=False, limit=None):
        queryset = _model_for(table).objects.all()
        try:
            for column, op, value in filters:
                lookup = column if op == "eq" else f"{column}__{op}"
                queryset = queryset.filter(**{lookup: value})

            if order_by:
                queryset = queryset.order_by(f"-{order_by}" if descending else order_by)
            else:
                queryset = queryset.order_by("id")
            if limit is not None:
                queryset = queryset[:limit]

            return list(queryset.values())
        except (DatabaseError, ValueError, ValidationError) as exc:
            raise BackendError(f"Could not read {table}: {exc}") from exc

    def _insert(self, table, rows):
        model = _model_for(table)
        try:
            with transaction.atomic():
                created = [model.objects.create(**row) for row in rows]
            return list(
                model.objects.filter(pk__in=[obj.pk for obj in created]).order_by("id").values()
            )
        except (DatabaseError, ValueError, ValidationError) as exc:
            raise BackendError(f"Could not insert into {table}: {exc}") from exc

    def _update(self, table, values, pk):
        model = _model_for(table)
        if "updated_at" in table_columns(table):
            values.setdefault("updated_at", timezone.now())
        try:
            matched = model.objects.filter(pk=pk).update(**values)
            if not matched:
                return []
            return list(model.objects.filter(pk=pk).values())
        except (DatabaseError, ValueError, ValidationError) as exc:
            raise BackendError(f"Could not update {table} {pk}: {exc}") from exc

    def upload(self, bucket, path, content):
        try:
            saved = self.storage.save(f"{bucket}/{path}", content)
        except OSError as exc:
            raise BackendError(f"Could not upload {path} to {bucket}: {exc}") from exc
        logger.info(f"Uploaded {saved}")
        return saved[len(bucket) + 1:]

    def public_url(self, bucket, path):
        return self.storage.url(f"{bucket}/{path}")


class MemoryBackend(TableBackend):
    """
    In-process tables with the same defaults and foreign keys as the models.

    Every insert/update is appended to ``writes`` as a ``Write`` tuple;
    ``seed`` loads rows without recording them.
    """

    def __init__(self, base_url="https://storage.example.test"):
        self.base_url = base_url
        self.tables = {name: [] for name in TABLES}
        self.files = {}
        self.writes = []
        self._ids = {name: count(1) for name in TABLES}

    def seed(self, table, rows):
        if isinstance(rows, dict):
            rows = [rows]
        return [self._store(table, dict(row)) for row in rows]

    def _fetch(self, table, filters, order_by=None, descending=False, limit=None):
        _model_for(table)
        rows = [
            copy.deepcopy(row)
            for row in self.tables[table]
            if all(_matches(row.get(column), op, value) for column, op, value in filters)
        ]
        sort_column = order_by or "id"
        rows.sort(key=lambda row: _sort_key(row.get(sort_column)), reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return rows

    def _insert(self, table, rows):
        stored = [self._store(table, row) for row in rows]
        self.writes.append(Write("insert", table, copy.deepcopy(rows), None))
        return stored

    def _update(self, table, values, pk):
        self.writes.append(Write("update", table, copy.deepcopy(values), pk))
        updated = []
        for record in self.tables[table]:
            if record["id"] == pk:
                record.update(copy.deepcopy(values))
                if "updated_at" in record:
                    record["updated_at"] = timezone.now()
                updated.append(copy.deepcopy(record))
        return updated

    def upload(self, bucket, path, content):
        self.files[(bucket, path)] = content.read()
        return path

    def public_url(self, bucket, path):
        return f"{self.base_url}/{bucket}/{path}"

    def _store(self, table, row):
        record = self._defaults(table)
        record.update(copy.deepcopy(row))
        if record.get("id") is None:
            record["id"] = next(self._ids[table])
        self.tables[table].append(record)
        return copy.deepcopy(record)

    def _defaults(self, table):
        now = timezone.now()
        defaults = {}
        for field in _model_for(table)._meta.concrete_fields:
            if field.primary_key:
                continue
            if getattr(field, "auto_now", False) or getattr(field, "auto_now_add", False):
                defaults[field.attname] = now
            elif field.has_default():
                defaults[field.attname] = field.get_default()
            elif field.null:
                defaults[field.attname] = None
        return defaults


def _matches(actual, op, expected):
    if op == "eq":
        return actual == expected
    if op == "gte":
        return actual is not None and actual >= expected
    if op == "in":
        return actual in expected
    raise BackendError(f"Unsupported filter: {op}")


def _sort_key(value):
    return (value is None, value)


def get_backend():
    backend_class = import_string(settings.RENTALS_BACKEND)
    return backend_class()
