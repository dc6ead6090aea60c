# -*- coding: utf-8 -*-
"""Onboarding — question catalog.

The catalog is a fixed, ordered sequence of question nodes. Conditional
"skip" edges are kept as data on the choices (``jump_to_id``) and exposed as
a ``(node_id, choice_value) -> target_id`` table.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from .errors import CatalogError

logger = logging.getLogger(__name__)


class QuestionKind(str, Enum):
    single_select = "single_select"
    multi_select = "multi_select"
    numeric_input = "numeric_input"
    paired_text_input = "paired_text_input"


@dataclass(frozen=True)
class Choice:
    label: str
    value: str
    full_width: bool = False
    jump_to_id: Optional[str] = None


@dataclass(frozen=True)
class NumericBounds:
    min: Optional[float] = None
    max: Optional[float] = None
    unit_suffix: str = ""


@dataclass(frozen=True)
class PairedField:
    field_key: str
    label: str
    placeholder: str = ""


@dataclass(frozen=True)
class QuestionNode:
    id: str
    kind: QuestionKind
    title: str
    prompt: str
    progress_fraction: float = 0.0
    choices: Tuple[Choice, ...] = ()
    numeric_bounds: Optional[NumericBounds] = None
    paired_fields: Tuple[PairedField, ...] = ()
    placeholder: Optional[str] = None

    @property
    def allows_multiple_values(self) -> bool:
        return self.kind is QuestionKind.multi_select

    @property
    def is_select(self) -> bool:
        return self.kind in (QuestionKind.single_select, QuestionKind.multi_select)

    def choice_for(self, value: str) -> Optional[Choice]:
        for choice in self.choices:
            if choice.value == value:
                return choice
        return None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "kind": self.kind.value,
            "title": self.title,
            "prompt": self.prompt,
            "progress_fraction": self.progress_fraction,
            "allows_multiple_values": self.allows_multiple_values,
        }
        if self.placeholder is not None:
            data["placeholder"] = self.placeholder
        if self.choices:
            data["choices"] = [
                {
                    "label": c.label,
                    "value": c.value,
                    "full_width": c.full_width,
                    "jump_to_id": c.jump_to_id,
                }
                for c in self.choices
            ]
        if self.numeric_bounds is not None:
            data["numeric_bounds"] = {
                "min": self.numeric_bounds.min,
                "max": self.numeric_bounds.max,
                "unit_suffix": self.numeric_bounds.unit_suffix,
            }
        if self.paired_fields:
            data["paired_fields"] = [
                {"field_key": f.field_key, "label": f.label, "placeholder": f.placeholder}
                for f in self.paired_fields
            ]
        return data


class QuestionCatalog:
    """Immutable ordered list of question nodes, validated at construction."""

    def __init__(self, nodes: Sequence[QuestionNode], *, strict: bool = False) -> None:
        if not nodes:
            raise CatalogError("Catalog must contain at least one question")
        self._nodes: Tuple[QuestionNode, ...] = tuple(nodes)
        self._index: Dict[str, int] = {}
        for idx, node in enumerate(self._nodes):
            if node.id in self._index:
                raise CatalogError(f"Duplicate question id: {node.id!r}")
            if not 0.0 <= node.progress_fraction <= 1.0:
                raise CatalogError(f"Progress of {node.id!r} must lie in [0, 1]")
            if node.is_select and not node.choices:
                raise CatalogError(f"Select question {node.id!r} has no choices")
            if node.kind is QuestionKind.paired_text_input and not node.paired_fields:
                raise CatalogError(f"Question {node.id!r} declares no fields")
            self._index[node.id] = idx

        for (node_id, value), target in self.jump_table().items():
            if target in self._index:
                continue
            if strict:
                raise CatalogError(f"Choice {value!r} of {node_id!r} jumps to unknown question {target!r}")
            logger.warning("Choice %r of %r jumps to unknown question %r", value, node_id, target)

    def __len__(self) -> int:
        return len(self._nodes)

    def __getitem__(self, index: int) -> QuestionNode:
        return self._nodes[index]

    def __iter__(self) -> Iterator[QuestionNode]:
        return iter(self._nodes)

    def index_of(self, node_id: str) -> Optional[int]:
        return self._index.get(node_id)

    def get(self, node_id: str) -> Optional[QuestionNode]:
        idx = self._index.get(node_id)
        return self._nodes[idx] if idx is not None else None

    def jump_table(self) -> Dict[Tuple[str, str], str]:
        table: Dict[Tuple[str, str], str] = {}
        for node in self._nodes:
            for choice in node.choices:
                if choice.jump_to_id:
                    table[(node.id, choice.value)] = choice.jump_to_id
        return table

    def to_list(self) -> List[Dict[str, Any]]:
        return [node.to_dict() for node in self._nodes]


_KIND_ALIASES = {
    "dropdown": QuestionKind.single_select,
    "input": QuestionKind.numeric_input,
    "double_input": QuestionKind.paired_text_input,
}


def _node_from_dict(raw: Dict[str, Any]) -> QuestionNode:
    if not isinstance(raw, dict):
        raise CatalogError(f"Question entries must be objects, got {type(raw).__name__}")
    node_id = str(raw.get("id") or "").strip()
    if not node_id:
        raise CatalogError("Question without id")

    kind_raw = str(raw.get("kind") or raw.get("type") or "")
    multi = bool(raw.get("allows_multiple_values") or raw.get("isMultiSelect"))
    if kind_raw == "selection":
        kind = QuestionKind.multi_select if multi else QuestionKind.single_select
    elif kind_raw in _KIND_ALIASES:
        kind = _KIND_ALIASES[kind_raw]
    else:
        try:
            kind = QuestionKind(kind_raw)
        except ValueError as exc:
            raise CatalogError(f"Unknown question kind {kind_raw!r} for {node_id!r}") from exc

    choices = tuple(
        Choice(
            label=str(opt.get("label", "")),
            value=str(opt.get("value", "")),
            full_width=bool(opt.get("full_width") or opt.get("isFullWidth")),
            jump_to_id=opt.get("jump_to_id") or opt.get("nextId") or None,
        )
        for opt in (raw.get("choices") or raw.get("options") or [])
    )

    bounds = None
    bounds_raw = raw.get("numeric_bounds")
    if bounds_raw is None and any(k in raw for k in ("min", "max", "suffix")):
        bounds_raw = {"min": raw.get("min"), "max": raw.get("max"), "unit_suffix": raw.get("suffix")}
    if bounds_raw is not None:
        bounds = NumericBounds(
            min=float(bounds_raw["min"]) if bounds_raw.get("min") is not None else None,
            max=float(bounds_raw["max"]) if bounds_raw.get("max") is not None else None,
            unit_suffix=str(bounds_raw.get("unit_suffix") or ""),
        )

    fields = tuple(
        PairedField(
            field_key=str(f.get("field_key") or f.get("key") or ""),
            label=str(f.get("label", "")),
            placeholder=str(f.get("placeholder", "")),
        )
        for f in (raw.get("paired_fields") or raw.get("inputs") or [])
    )

    return QuestionNode(
        id=node_id,
        kind=kind,
        title=str(raw.get("title", "")),
        prompt=str(raw.get("prompt") or raw.get("question") or ""),
        progress_fraction=float(raw.get("progress_fraction", raw.get("progress", 0.0)) or 0.0),
        choices=choices,
        numeric_bounds=bounds,
        paired_fields=fields,
        placeholder=raw.get("placeholder"),
    )


def catalog_from_list(items: List[Dict[str, Any]], *, strict: bool = False) -> QuestionCatalog:
    if not isinstance(items, list):
        raise CatalogError("Catalog JSON must be a list of questions")
    return QuestionCatalog([_node_from_dict(item) for item in items], strict=strict)


def load_catalog(path: Path, *, strict: bool = False) -> QuestionCatalog:
    try:
        items = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise CatalogError(f"Cannot read catalog {path}: {exc}") from exc
    return catalog_from_list(items, strict=strict)


_SELF_TITLE = "Pour mieux vous connaître"
_GLYCEMIA_TITLE = "Votre situation glycémique"
_HEALTH_TITLE = "Enjeux de santé associés"

DEFAULT_CATALOG = QuestionCatalog(
    [
        QuestionNode(
            id="identity",
            kind=QuestionKind.paired_text_input,
            title="Bienvenue",
            prompt="Comment vous appelez-vous ?",
            progress_fraction=0.0,
            paired_fields=(
                PairedField("firstname", "Prénom", "Ex: Camille"),
                PairedField("lastname", "Nom", "Ex: Dupont"),
            ),
        ),
        QuestionNode(
            id="genre",
            kind=QuestionKind.single_select,
            title=_SELF_TITLE,
            prompt="Quel est votre genre ?",
            progress_fraction=0.05,
            choices=(
                Choice("Femme", "Femme"),
                Choice("Homme", "Homme"),
                Choice("Autre / Je préfère ne pas répondre", "Autre", full_width=True),
            ),
        ),
        QuestionNode(
            id="age",
            kind=QuestionKind.numeric_input,
            title=_SELF_TITLE,
            prompt="Quel est votre âge ?",
            progress_fraction=0.125,
            placeholder="Ex: 35",
            numeric_bounds=NumericBounds(18, 120, "ans"),
        ),
        QuestionNode(
            id="taille",
            kind=QuestionKind.numeric_input,
            title=_SELF_TITLE,
            prompt="Quelle est votre taille ?",
            progress_fraction=0.25,
            placeholder="Ex: 175",
            numeric_bounds=NumericBounds(50, 250, "cm"),
        ),
        QuestionNode(
            id="poids",
            kind=QuestionKind.single_select,
            title=_SELF_TITLE,
            prompt="Quel est votre poids actuel ?",
            progress_fraction=0.375,
            choices=(
                Choice("Moins de 60 kg", "-60"),
                Choice("60 - 70 kg", "60-70"),
                Choice("70 - 80 kg", "70-80"),
                Choice("80 - 90 kg", "80-90"),
                Choice("90 - 100 kg", "90-100"),
                Choice("Plus de 100 kg", "+100"),
            ),
        ),
        QuestionNode(
            id="glycemieMoyenne",
            kind=QuestionKind.numeric_input,
            title=_GLYCEMIA_TITLE,
            prompt="Quel est votre taux de glycémie moyen ?",
            progress_fraction=0.5,
            placeholder="Ex: 110",
            numeric_bounds=NumericBounds(20, 1000, "mg/dL"),
        ),
        QuestionNode(
            id="glycemieObjective",
            kind=QuestionKind.single_select,
            title=_GLYCEMIA_TITLE,
            prompt="Avez-vous un objectif glycémique à ne pas dépasser ?",
            progress_fraction=0.625,
            choices=(
                Choice("Oui", "Oui"),
                Choice("Non", "Non", jump_to_id="AutresPathologies"),
            ),
        ),
        QuestionNode(
            id="glycemieCible",
            kind=QuestionKind.numeric_input,
            title=_GLYCEMIA_TITLE,
            prompt="Quel est-il ?",
            progress_fraction=0.625,
            placeholder="Ex: 140",
            numeric_bounds=NumericBounds(70, 250, "mg/dL"),
        ),
        QuestionNode(
            id="AutresPathologies",
            kind=QuestionKind.single_select,
            title=_HEALTH_TITLE,
            prompt="Votre diabète est-il associé à d'autres pathologies ?",
            progress_fraction=0.75,
            choices=(
                Choice("Oui", "Oui"),
                Choice("Non", "Non", jump_to_id="activitePhysique"),
            ),
        ),
        QuestionNode(
            id="detailsPathologies",
            kind=QuestionKind.multi_select,
            title=_HEALTH_TITLE,
            prompt="Lesquelles ?",
            progress_fraction=0.75,
            choices=(
                Choice("Hypertension", "Hypertension"),
                Choice("Cholestérol", "Cholestérol"),
                Choice("Autres", "Autres"),
                Choice("Je préfère ne pas préciser", "Non"),
            ),
        ),
        QuestionNode(
            id="activitePhysique",
            kind=QuestionKind.single_select,
            title="Activité physique",
            prompt="Dans votre quotidien, quelle place occupe l'activité physique ?",
            progress_fraction=0.875,
            choices=(
                Choice("Je bouge peu au quotidien", "Faible"),
                Choice("Je fais du sport de façon régulière", "Intense"),
                Choice(
                    "Je bouge un peu, surtout à travers des activités comme la marche",
                    "Moyen",
                    full_width=True,
                ),
            ),
        ),
        QuestionNode(
            id="regimeAlimentaire",
            kind=QuestionKind.multi_select,
            title="Régime alimentaire",
            prompt="Suivez-vous un régime alimentaire particulier ?",
            progress_fraction=0.975,
            choices=(
                Choice("Non", "Non"),
                Choice("Vegetarien", "Vegetarien"),
                Choice("Vegan", "Vegan"),
                Choice("Coeliaque", "Coeliaque"),
                Choice("Sans porc", "Sans porc"),
                Choice("Sans produits laitiers", "Sans produits laitiers"),
            ),
        ),
    ],
    strict=True,
)
