from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BLOBWORKS_", env_file=".env", extra="ignore", populate_by_name=True
    )

    app_name: str = "blobworks"
    env: str = "dev"
    host: str = "0.0.0.0"  # nosec B104 - intentional for container deployments
    port: int = 8080
    base_route: str = "/blob"

    # Observability
    enable_metrics: bool = Field(default=True, validation_alias="ENABLE_METRICS")
    log_level: str = "INFO"

    # Blob storage service
    default_namespace: str | None = Field(default=None, validation_alias="BLOB_DEFAULT_NAMESPACE")
    include_user_identity: bool = Field(
        default=False, validation_alias="BLOB_INCLUDE_USER_IDENTITY"
    )
    include_node_identity: bool = Field(default=True, validation_alias="BLOB_INCLUDE_NODE_IDENTITY")
    node_identity: str = Field(default="node-default", validation_alias="NODE_IDENTITY")

    # Encryption (vault)
    enable_encryption: bool = Field(default=False, validation_alias="BLOB_ENABLE_ENCRYPTION")
    vault_key_id: str = Field(default="blob-storage", validation_alias="VAULT_KEY_ID")
    vault_master_key: str | None = Field(default=None, validation_alias="VAULT_MASTER_KEY")

    # Entry (metadata) storage
    entity_storage_type: str = Field(default="memory", validation_alias="ENTITY_STORAGE_TYPE")
    database_url: str = Field(
        default="sqlite+aiosqlite:///./blobworks.db",
        validation_alias="DATABASE_URL",
    )

    # Connectors, comma separated namespaces (memory, file, s3, azure, gcp, ipfs)
    blob_connectors: str = Field(default="memory", validation_alias="BLOB_CONNECTORS")

    # File connector
    file_directory: str = Field(
        default="/var/lib/blobworks/blobs", validation_alias="BLOB_FILE_DIRECTORY"
    )
    file_extension: str = Field(default=".blob", validation_alias="BLOB_FILE_EXTENSION")

    # S3 connector
    s3_region: str | None = Field(default=None, validation_alias="S3_REGION")
    s3_bucket_name: str | None = Field(default=None, validation_alias="S3_BUCKET")
    s3_access_key_id: str | None = Field(default=None, validation_alias="AWS_ACCESS_KEY_ID")
    s3_secret_access_key: str | None = Field(default=None, validation_alias="AWS_SECRET_ACCESS_KEY")
    s3_endpoint: str | None = Field(default=None, validation_alias="S3_ENDPOINT_URL")

    # Azure connector
    azure_account_name: str | None = Field(default=None, validation_alias="AZURE_ACCOUNT_NAME")
    azure_account_key: str | None = Field(default=None, validation_alias="AZURE_ACCOUNT_KEY")
    azure_container_name: str | None = Field(default=None, validation_alias="AZURE_CONTAINER")
    azure_endpoint: str | None = Field(default=None, validation_alias="AZURE_ENDPOINT")

    # GCP connector
    gcp_project_id: str | None = Field(default=None, validation_alias="GCP_PROJECT_ID")
    gcp_bucket_name: str | None = Field(default=None, validation_alias="GCP_BUCKET")
    gcp_credentials: str | None = Field(default=None, validation_alias="GCP_CREDENTIALS")
    gcp_api_endpoint: str | None = Field(default=None, validation_alias="GCP_API_ENDPOINT")

    # IPFS connector
    ipfs_api_url: str | None = Field(default=None, validation_alias="IPFS_API_URL")
    ipfs_bearer_token: str | None = Field(default=None, validation_alias="IPFS_BEARER_TOKEN")

    @property
    def connector_namespaces(self) -> list[str]:
        """Enabled connector namespaces in configuration order."""
        return [name.strip().lower() for name in self.blob_connectors.split(",") if name.strip()]


settings = Settings()
