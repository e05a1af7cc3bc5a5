"""Schemas for the sync trigger response."""

from __future__ import annotations

from marshmallow import Schema, fields


class DrawOutcomeSchema(Schema):
    concurso = fields.Int(required=True)
    status = fields.Function(lambda outcome: outcome.status.value)
    detail = fields.Str(allow_none=True)


class SyncSummarySchema(Schema):
    """Serialize a SyncSummary for the worker endpoint."""

    message = fields.Str(required=True)
    records_added = fields.Int(required=True)
    last_known_draw = fields.Int(attribute="remote_max")
    local_max = fields.Int()
    up_to_date = fields.Bool()
    pending = fields.List(fields.Int())
    failures = fields.Function(lambda summary: [o.concurso for o in summary.failures])
    results = fields.List(fields.Nested(DrawOutcomeSchema), attribute="outcomes")
