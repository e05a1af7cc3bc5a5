"""Schemas for lotofácil results: upstream payloads in, stored rows out."""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable
from dataclasses import dataclass

from marshmallow import EXCLUDE, Schema, ValidationError, fields, post_load, validate, validates


@dataclass(frozen=True)
class Draw:
    """A normalized draw as it will be persisted."""

    concurso: int
    data: dt.date
    dezenas: tuple[int, ...]

    @property
    def encoded_dezenas(self) -> str:
        return encode_dezenas(self.dezenas)


def encode_dezenas(numbers: Iterable[int]) -> str:
    """Join drawn numbers as zero-padded two-digit values, keeping their order."""

    return " ".join(f"{int(n):02d}" for n in numbers)


class CaixaDrawSchema(Schema):
    """Validate a draw payload from the CAIXA Portal de Loterias API.

    Only the fields the mirror stores are read; everything else is ignored.
    Dates arrive as DD/MM/YYYY and numbers as zero-padded strings.
    """

    class Meta:
        unknown = EXCLUDE

    concurso = fields.Integer(data_key="numero", required=True, strict=False, validate=validate.Range(min=1))
    data = fields.Date(data_key="dataApuracao", required=True, format="%d/%m/%Y")
    dezenas = fields.List(
        fields.Integer(strict=False, validate=validate.Range(min=0, max=99)),
        data_key="listaDezenas",
        required=True,
    )

    @validates("dezenas")
    def _validate_dezenas(self, value, **kwargs):  # type: ignore[no-untyped-def]
        if not value:
            raise ValidationError("Must not be empty.")

    @post_load
    def _make_draw(self, data, **kwargs):  # type: ignore[no-untyped-def]
        return Draw(
            concurso=int(data["concurso"]),
            data=data["data"],
            dezenas=tuple(int(n) for n in data["dezenas"]),
        )


class ResultadoSchema(Schema):
    """Serialize a stored result row."""

    concurso = fields.Int(required=True)
    data = fields.Date(required=True)
    dezenas = fields.Str(required=True)


class ResultadosQuerySchema(Schema):
    """Validate query args for the recent results listing."""

    class Meta:
        unknown = EXCLUDE

    limit = fields.Integer(required=False, load_default=None)

    def __init__(self, *, default_limit: int = 10, max_limit: int = 100, **kwargs) -> None:  # type: ignore[no-untyped-def]
        super().__init__(**kwargs)
        self._default_limit = default_limit
        self._max_limit = max_limit

    @post_load
    def _apply_limit_bounds(self, data, **kwargs):  # type: ignore[no-untyped-def]
        limit = data.get("limit")
        if limit is None:
            data["limit"] = self._default_limit
        elif limit < 1 or limit > self._max_limit:
            raise ValidationError({"limit": [f"Must be between 1 and {self._max_limit}."]})
        return data
