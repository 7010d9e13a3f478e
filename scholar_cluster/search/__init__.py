from .clustering import ClusterInputBuilder, KMeansClusteringEngine, build_feature_vectors
from .fusion import RankingFusion

__all__ = ["ClusterInputBuilder", "KMeansClusteringEngine", "RankingFusion", "build_feature_vectors"]
