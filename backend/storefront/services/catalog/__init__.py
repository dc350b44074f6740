from .compiler import CompiledQuery, FilterCompiler, selection_cache_key
from .facets import FacetAggregator, FacetStats
from .identifiers import SubcategoryNormalizer
from .planner import PageResult, PaginationPlanner
from .result_cache import NullResultCache, ResultCache
from .selection import FilterSelection, parse_filter_selection
from .service import CatalogService
from .store import InMemoryProductStore, ProductRecord, ProductStore
