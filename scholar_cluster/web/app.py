from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool

from scholar_cluster.api.models import (
    Cluster,
    PaperDetail,
    PaperSummary,
    RankedPaper,
    SearchResponse,
)
from scholar_cluster.config.settings import settings
from scholar_cluster.errors import (
    ClusteringError,
    IndexUnavailableError,
    QuerySyntaxError,
    ScholarClusterError,
)
from scholar_cluster.pipeline import SearchPipeline
from scholar_cluster.web.security import api_key_auth, rate_limiter

logger = logging.getLogger("scholar_cluster.web")
logging.basicConfig(level=logging.INFO)


# -------------------------------------------------------------------
# Lifespan: build the pipeline once at startup
# -------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Build the search pipeline from settings (dataset + embedding table).

    With no dataset configured the app still starts and search endpoints
    answer 503. A configured dataset that fails to load (parse error,
    missing file, unusable embedding model) aborts startup.
    """
    pipeline: Optional[SearchPipeline] = getattr(app.state, "pipeline", None)

    if pipeline is None and settings.DATASET_PATH is not None:
        try:
            pipeline = await run_in_threadpool(SearchPipeline.from_settings, settings)
        except (ScholarClusterError, FileNotFoundError):
            logger.exception("Failed to build the search pipeline from %s", settings.DATASET_PATH)
            raise

    if pipeline is None:
        logger.info("No search pipeline loaded; set SCHOLAR_CLUSTER_DATASET_PATH")
    else:
        logger.info("Search pipeline ready with %d papers", len(pipeline.corpus))

    app.state.pipeline = pipeline

    yield


app = FastAPI(
    title="Scholar Cluster API",
    description="Citation-aware semantic search and clustering over a paper corpus.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -------------------------------------------------------------------
# Middleware
# -------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log method, path, status and duration of every request.
    """
    start = time.time()

    response = await call_next(request)

    duration_ms = (time.time() - start) * 1000
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} "
        f"in {duration_ms:.2f}ms"
    )

    return response


# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------


def get_pipeline(request: Request) -> SearchPipeline:
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise HTTPException(status_code=503, detail="Search pipeline not loaded.")
    return pipeline


# -------------------------------------------------------------------
# Endpoints
# -------------------------------------------------------------------


@app.get("/health")
def health(request: Request):
    pipeline = getattr(request.app.state, "pipeline", None)
    return {
        "status": "ok",
        "papers": len(pipeline.corpus) if pipeline is not None else 0,
    }


@app.get(
    "/search",
    response_model=SearchResponse,
    dependencies=[Depends(api_key_auth), Depends(rate_limiter)],
)
async def search(
    q: str = Query(..., min_length=1, description="Query text."),
    top_n: int = Query(settings.DEFAULT_TOP_N, ge=1, le=500),
    clusters: int = Query(settings.DEFAULT_NUM_CLUSTERS, ge=1, le=100),
    pipeline: SearchPipeline = Depends(get_pipeline),
) -> SearchResponse:
    try:
        groups = await run_in_threadpool(pipeline.clustered_candidates, q, top_n, clusters)
    except (QuerySyntaxError, ClusteringError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except IndexUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc))

    return SearchResponse(
        query=q,
        top_n=top_n,
        num_clusters=clusters,
        clusters=[
            Cluster(index=i, papers=[RankedPaper.from_candidate(c) for c in group])
            for i, group in enumerate(groups, start=1)
        ],
    )


@app.get(
    "/papers/{paper_id}",
    response_model=PaperDetail,
    dependencies=[Depends(api_key_auth)],
)
def paper_detail(
    paper_id: str,
    pipeline: SearchPipeline = Depends(get_pipeline),
) -> PaperDetail:
    corpus = pipeline.corpus
    paper = corpus.get(paper_id)
    if paper is None:
        raise HTTPException(status_code=404, detail=f"Paper {paper_id} not found")

    return PaperDetail(
        paper=PaperSummary.from_paper(paper),
        abstract=paper.abstract,
        references=list(paper.references),
        cited_by=sorted(corpus.graph.citers(paper_id)),
    )
