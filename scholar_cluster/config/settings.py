from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from scholar_cluster.models.weights import FusionWeights


class EmbeddingBackend(str, Enum):
    """
    Source of the word embedding table.

    WORD2VEC             - a word2vec text/binary model file loaded with gensim.
    SENTENCE_TRANSFORMER - single tokens encoded by a SentenceTransformer model.
    """
    WORD2VEC = "word2vec"
    SENTENCE_TRANSFORMER = "sentence-transformer"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
        env_prefix="SCHOLAR_CLUSTER_"
    )


    # ------------------------------------------------------------------
    # Core paths
    # ------------------------------------------------------------------
    DATA_DIR: Path = Field(
        default=Path("data"),
        description="Base data directory for datasets and saved indexes.",
    )

    DATASET_PATH: Optional[Path] = Field(
        default=None,
        description="Citation-network dataset loaded by the web app at startup.",
    )

    # ------------------------------------------------------------------
    # Embeddings
    # ------------------------------------------------------------------
    EMBEDDING_BACKEND: EmbeddingBackend = Field(
        default=EmbeddingBackend.WORD2VEC,
        description="Which embedding table implementation to construct.",
    )

    EMBEDDING_MODEL_PATH: Optional[Path] = Field(
        default=None,
        description="word2vec model file (text or binary format).",
    )

    EMBEDDING_BINARY: Optional[bool] = Field(
        default=None,
        description=(
            "Force binary (True) or text (False) word2vec format. "
            "If None, files ending in '.bin' are read as binary."
        ),
    )

    SENTENCE_MODEL_NAME: str = Field(
        default="all-MiniLM-L6-v2",
        description="SentenceTransformer model name for the sentence-transformer backend.",
    )

    EMBEDDING_DEVICE: str = Field(
        default="auto",
        description="Device for the SentenceTransformer backend: 'auto', 'cpu', or 'cuda'.",
    )

    EMBEDDING_CACHE_SIZE: int = Field(
        default=10000,
        ge=1,
        description="Token vectors kept in memory by the sentence-transformer backend.",
    )

    # ------------------------------------------------------------------
    # Authority scoring
    # ------------------------------------------------------------------
    DAMPING_FACTOR: float = Field(
        default=0.85,
        ge=0.0,
        le=1.0,
        description="Damping factor d of the authority propagation.",
    )

    AUTHORITY_ROUNDS: int = Field(
        default=1,
        ge=0,
        description="Number of propagation rounds over the citation graph.",
    )

    AUTHORITY_TOLERANCE: Optional[float] = Field(
        default=None,
        description=(
            "If set, stop propagating once the L1 change between two rounds "
            "falls below this value (never more than AUTHORITY_ROUNDS)."
        ),
    )

    AUTHORITY_SCALE: float = Field(
        default=100000.0,
        gt=0.0,
        description="Multiplier applied to stored authority scores; fusion divides by it.",
    )

    REDISTRIBUTE_DANGLING: bool = Field(
        default=True,
        description=(
            "Spread the mass of papers citing nothing in the corpus uniformly, "
            "so the scores keep summing to 1.0."
        ),
    )

    # ------------------------------------------------------------------
    # Fusion / clustering
    # ------------------------------------------------------------------
    LEXICAL_WEIGHT: float = Field(default=0.5, description="Weight of the BM25 score.")
    SEMANTIC_WEIGHT: float = Field(default=0.2, description="Weight of the cosine similarity.")
    AUTHORITY_WEIGHT: float = Field(default=0.3, description="Weight of the descaled authority.")

    OVERFETCH_FACTOR: int = Field(
        default=10,
        ge=1,
        description="Lexical hits requested per wanted result, to leave room for re-ranking.",
    )

    DEFAULT_TOP_N: int = Field(default=20, ge=1, description="Default number of results.")
    DEFAULT_NUM_CLUSTERS: int = Field(default=5, ge=1, description="Default number of clusters.")

    CLUSTER_MAX_ITERATIONS: int = Field(
        default=100,
        ge=1,
        description="Iteration cap handed to the clustering engine.",
    )

    CLUSTER_RANDOM_STATE: Optional[int] = Field(
        default=None,
        description="Seed for k-means initialisation. None means non-reproducible cluster ids.",
    )

    # ------------------------------------------------------------------
    # Observability / API
    # ------------------------------------------------------------------
    PROGRESS_EVERY: int = Field(
        default=1000,
        ge=1,
        description="Log ingestion progress every N records.",
    )

    API_KEY: Optional[SecretStr] = Field(
        default=None,
        description="API key for header-based auth. If None, auth is disabled.",
    )

    RATE_LIMIT_MAX_REQUESTS: int = Field(
        default=60,
        ge=1,
        description="Search requests allowed per client host and window.",
    )

    RATE_LIMIT_WINDOW_SECONDS: float = Field(
        default=60.0,
        gt=0.0,
        description="Length of the rate-limit window.",
    )

    # ------------------------------------------------------------------
    # Convenience derived values
    # ------------------------------------------------------------------
    @property
    def index_dir(self) -> Path:
        return self.DATA_DIR / "index"

    @property
    def fusion_weights(self) -> FusionWeights:
        return FusionWeights(
            lexical=self.LEXICAL_WEIGHT,
            semantic=self.SEMANTIC_WEIGHT,
            authority=self.AUTHORITY_WEIGHT,
            authority_scale=self.AUTHORITY_SCALE,
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Singleton-style accessor so we only construct Settings once and
    ensure directories exist on first access.
    """
    global _settings
    if _settings is None:
        _settings = Settings()

        _settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
        _settings.index_dir.mkdir(parents=True, exist_ok=True)

    return _settings


settings = get_settings()
