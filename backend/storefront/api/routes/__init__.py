from .catalog import router as catalog
from .health import router as health
