# Routes package
from .analysis import router as analysis_router
from .documents import router as documents_router
