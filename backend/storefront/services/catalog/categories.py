"""Static category catalog.

The catalog is the single source of truth for canonical latin slugs. Legacy
slugs cover the Cyrillic and alternative transliterations that older imports
wrote into product records.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class Subcategory:
    id: str
    slug: str
    name: str
    category_id: str
    legacy_slugs: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Category:
    id: str
    slug: str
    name: str
    subcategories: Tuple[Subcategory, ...] = ()
    legacy_slugs: Tuple[str, ...] = ()

    def canonical_subcategory_id(self, subcategory: Subcategory) -> str:
        return f"{self.slug}-{subcategory.slug}"

    def all_canonical_subcategory_ids(self) -> frozenset:
        return frozenset(self.canonical_subcategory_id(sub) for sub in self.subcategories)


def _category(
    category_id: str,
    slug: str,
    name: str,
    subcategories: Iterable[Tuple[str, str, Tuple[str, ...]]],
    legacy_slugs: Tuple[str, ...] = (),
) -> Category:
    subs = tuple(
        Subcategory(
            id=f"{category_id}-{idx}",
            slug=sub_slug,
            name=sub_name,
            category_id=category_id,
            legacy_slugs=sub_legacy,
        )
        for idx, (sub_slug, sub_name, sub_legacy) in enumerate(subcategories, start=1)
    )
    return Category(id=category_id, slug=slug, name=name, subcategories=subs, legacy_slugs=legacy_slugs)


CATEGORIES: Tuple[Category, ...] = (
    _category(
        "1",
        "profoborudovanie",
        "Профоборудование",
        [
            ("teplovoe-oborudovanie", "Тепловое оборудование", ("тепловое-оборудование",)),
            ("holodilnoe-oborudovanie", "Холодильное оборудование", ("холодильное-оборудование", "kholodilnoe-oborudovanie")),
            ("elektromehanicheskoe", "Электромеханическое оборудование", ("электромеханическое",)),
            ("posudomoechnoe-oborudovanie", "Посудомоечное оборудование", ("посудомоечное-оборудование",)),
        ],
        legacy_slugs=("профоборудование",),
    ),
    _category(
        "2",
        "kofevarki-i-kofemashiny",
        "Кофеварки и кофемашины",
        [
            ("kofemashiny", "Кофемашины", ("кофемашины",)),
            ("kofevarki", "Кофеварки", ("кофеварки",)),
            ("kofemolki", "Кофемолки", ("кофемолки",)),
        ],
        legacy_slugs=("кофеварки-и-кофемашины",),
    ),
    _category(
        "3",
        "promyshlennaya-mebel",
        "Промышленная мебель",
        [
            ("stoly", "Столы производственные", ("столы",)),
            ("stellazhi", "Стеллажи", ("стеллажи",)),
            ("shkafy", "Шкафы", ("шкафы",)),
        ],
        legacy_slugs=("промышленная-мебель",),
    ),
    _category(
        "4",
        "klimaticheskaya-tehnika",
        "Климатическая техника",
        [
            ("kondicionery", "Кондиционеры", ("кондиционеры", "konditsionery")),
            ("obogrevateli", "Обогреватели", ("обогреватели",)),
            ("uvlazhniteli", "Увлажнители воздуха", ("увлажнители",)),
        ],
        legacy_slugs=("климатическая-техника",),
    ),
    _category(
        "5",
        "telekommunikacionnoe-oborudovanie",
        "Телекоммуникационное оборудование",
        [
            ("marshrutizatory", "Маршрутизаторы", ("маршрутизаторы",)),
            ("kommutatory", "Коммутаторы", ("коммутаторы",)),
        ],
        legacy_slugs=("телекоммуникационное-оборудование", "telekomunicionoe-oborudovanie"),
    ),
    _category(
        "6",
        "tochki-prodazh",
        "Точки продаж",
        [
            ("kassovye-apparaty", "Кассовые аппараты", ("кассовые-аппараты",)),
            ("torgovye-vesy", "Торговые весы", ("торговые-весы",)),
        ],
        legacy_slugs=("точки-продаж",),
    ),
    _category(
        "7",
        "bytovaya-tehnika",
        "Бытовая техника",
        [
            ("pylesosy", "Пылесосы", ("пылесосы",)),
            ("mikrovolnovye-pechi", "Микроволновые печи", ("микроволновые-печи",)),
            ("chayniki", "Чайники", ("чайники",)),
        ],
        legacy_slugs=("бытовая-техника", "bitovaya-tehnika"),
    ),
)


@dataclass
class CategoryCatalog:
    """Immutable lookup indexes over the static category list."""

    categories: Tuple[Category, ...] = CATEGORIES
    _by_id: Dict[str, Category] = field(init=False, repr=False)
    _by_slug: Dict[str, Category] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._by_id = {cat.id: cat for cat in self.categories}
        self._by_slug = {}
        for cat in self.categories:
            self._by_slug[cat.slug.lower()] = cat
            for legacy in cat.legacy_slugs:
                self._by_slug.setdefault(legacy.lower(), cat)

    def get(self, category_id: Optional[str]) -> Optional[Category]:
        if not category_id:
            return None
        return self._by_id.get(str(category_id).strip())

    def normalize_category_id(self, raw: Optional[str]) -> Optional[str]:
        """Map a category id, latin slug or legacy slug to the catalog id."""
        text = str(raw or "").strip()
        if not text:
            return None
        if text in self._by_id:
            return text
        category = self._by_slug.get(text.lower())
        return category.id if category else None

    def category_ids(self) -> List[str]:
        return [cat.id for cat in self.categories]

    def category_prefixes(self, category: Category) -> List[str]:
        """All recognized `{prefix}-` forms for a category, longest first."""
        prefixes = {category.slug, category.id, *category.legacy_slugs}
        return sorted((p.lower() for p in prefixes if p), key=len, reverse=True)


default_catalog = CategoryCatalog()
