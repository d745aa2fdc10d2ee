from replenishment_engine.data_layer.dynamodb_repository import (
    DynamoSnapshotRepository,
    RepositoryError,
)

__all__ = ["DynamoSnapshotRepository", "RepositoryError"]
