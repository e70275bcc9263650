# idi_canarias/metrics.py
from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Callable, Hashable, Iterable, Mapping

from idi_canarias.text_norm import normalize


def _finite(x) -> bool:
    return x is not None and not isinstance(x, bool) and math.isfinite(float(x))


def yoy_change(current: float | None, previous: float | None) -> float | None:
    """Variación interanual en %. None si falta algún valor o el anterior es 0."""
    if not _finite(current) or not _finite(previous) or previous == 0:
        return None
    return (float(current) - float(previous)) / float(previous) * 100


def share_of_total(sector_value: float | None, total_value: float | None) -> float | None:
    """Peso del sector sobre el total, en %. None si el total es 0 o falta."""
    if not _finite(sector_value) or not _finite(total_value) or total_value == 0:
        return None
    return float(sector_value) / float(total_value) * 100


def per_member_average(aggregate_value: float | None, member_count: int | None) -> float | None:
    """Media por país de un agregado (UE: 27, Zona Euro: 19/20)."""
    if not _finite(aggregate_value) or not member_count or member_count <= 0:
        return None
    return float(aggregate_value) / member_count


@dataclass(frozen=True)
class RankPosition:
    rank: int   # 1 = mayor valor
    total: int  # entradas clasificadas


def rank(
    entries: Iterable[tuple[Hashable, float | None]],
    exclude: Callable[[Hashable], bool] | None = None,
    names: Mapping[Hashable, str] | None = None,
) -> dict[Hashable, RankPosition]:
    """
    Ranking descendente por valor. Los empates se deshacen por nombre
    normalizado ascendente (estable entre renders). Las entradas excluidas
    (p.ej. agregados supranacionales) y las que no tienen valor no reciben
    puesto ni cuentan en el total.
    """
    names = names or {}
    kept = [
        (id_, float(v)) for id_, v in entries
        if _finite(v) and not (exclude and exclude(id_))
    ]
    kept.sort(key=lambda e: (-e[1], normalize(names.get(e[0], str(e[0])))))
    total = len(kept)
    return {id_: RankPosition(rank=i, total=total) for i, (id_, _) in enumerate(kept, 1)}


def sector_shares(breakdown: Mapping, total_key=None) -> dict:
    """
    Reparto porcentual de cada sector sobre el total.
    Si `total_key` está en el desglose se usa ese total; si no, la suma de sectores.
    """
    if total_key is not None and total_key in breakdown:
        total = breakdown[total_key]
    else:
        vals = [v for v in breakdown.values() if _finite(v)]
        total = sum(vals) if vals else None
    return {k: share_of_total(v, total) for k, v in breakdown.items() if k != total_key}


def average(values: Iterable[float | None]) -> float | None:
    vals = [float(v) for v in values if _finite(v)]
    return sum(vals) / len(vals) if vals else None
