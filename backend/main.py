"""FastAPI application for differential receptor conservation."""
import logging
from typing import Literal, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import PlainTextResponse

from cache import ParsedFileCache
from catalog import ReceptorCatalog
from comparison import ComparisonEngine, export_table, sort_by_category
from config import load_settings
from errors import ComparisonError
from schemas import ComparisonRequest, ComparisonResult, Receptor

settings = load_settings()
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Receptor Conservation Comparison", version="1.0")

EXPORT_MEDIA_TYPES = {"csv": "text/csv", "tsv": "text/tab-separated-values"}


def get_engine() -> ComparisonEngine:
    """Engine shared by all requests; built on first use."""
    engine = getattr(app.state, "engine", None)
    if engine is None:
        try:
            catalog = ReceptorCatalog.from_file(settings.catalog_file, settings.data_dir)
        except ComparisonError as e:
            logger.error(e.message)
            raise HTTPException(status_code=e.status_code, detail=e.message)
        engine = ComparisonEngine(
            catalog,
            cache=ParsedFileCache(settings.cache_size),
            default_threshold=settings.default_threshold,
        )
        app.state.engine = engine
    return engine


def _run_comparison(engine: ComparisonEngine, request: ComparisonRequest) -> ComparisonResult:
    try:
        return engine.compare(request.gene1, request.gene2, request.threshold)
    except ComparisonError as e:
        if e.status_code >= 500:
            logger.error(f"Comparison of {request.gene1} and {request.gene2} failed: {e.message}")
        raise HTTPException(status_code=e.status_code, detail=e.message)


# --- Receptor endpoints ---

@app.get("/api/receptors")
async def list_receptors(
    q: str = "",
    receptor_class: Optional[str] = None,
    limit: Optional[int] = None,
    engine: ComparisonEngine = Depends(get_engine),
) -> list[Receptor]:
    """Search the receptor catalog."""
    return engine.catalog.search(q, receptor_class=receptor_class, limit=limit)


@app.get("/api/receptors/{gene}")
async def get_receptor(gene: str, engine: ComparisonEngine = Depends(get_engine)) -> Receptor:
    try:
        return engine.catalog.get(gene)
    except ComparisonError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


# --- Comparison endpoints ---

@app.post("/api/receptor-comparison")
async def compare_receptors(
    request: ComparisonRequest,
    engine: ComparisonEngine = Depends(get_engine),
) -> ComparisonResult:
    """Categorize the residues of two receptors by conservation."""
    return _run_comparison(engine, request)


@app.post("/api/receptor-comparison/export")
async def export_comparison(
    request: ComparisonRequest,
    fmt: Literal["csv", "tsv"] = "tsv",
    sort: bool = False,
    engine: ComparisonEngine = Depends(get_engine),
) -> PlainTextResponse:
    """Download the categorized residues as a table."""
    result = _run_comparison(engine, request)
    residues = result.categorized_residues
    if sort:
        residues = sort_by_category(residues)

    return PlainTextResponse(
        export_table(residues, fmt),
        media_type=EXPORT_MEDIA_TYPES[fmt],
        headers={"Content-Disposition": f'attachment; filename="residue_comparison.{fmt}"'},
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
