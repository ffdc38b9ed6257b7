from dataclasses import dataclass
import os

def _env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")

@dataclass(frozen=True)
class Settings:
    # Aptech (single batch endpoint, credentials in the query string)
    aptech_url: str = os.environ.get(
        "APTECH_URL", "https://sdatelemetry.com/API_ap_telemetry/datatelemetry.php"
    )
    aptech_bbws_id: str = os.environ.get("APTECH_BBWS_ID", "2")
    aptech_user: str = os.environ.get("APTECH_USER", "")
    aptech_password: str = os.environ.get("APTECH_PASSWORD", "")

    # Higertech (one request per device)
    higertech_base_url: str = os.environ.get("HIGERTECH_BASE_URL", "https://api.higertech.com/v2")

    # Scheduling
    sync_interval_s: int = int(os.environ.get("SYNC_INTERVAL_S", "300"))
    run_once: bool = _env_flag("RUN_ONCE")

    # HTTP
    request_timeout_s: int = int(os.environ.get("REQUEST_TIMEOUT_S", "30"))
    request_attempts: int = int(os.environ.get("REQUEST_ATTEMPTS", "1"))  # 1 = no retry within a cycle

    # Trino
    trino_host: str = os.environ.get("TRINO_HOST", "localhost")
    trino_port: int = int(os.environ.get("TRINO_PORT", "8080"))
    trino_user: str = os.environ.get("TRINO_USER", "telemetry-sync")
    trino_catalog: str = os.environ.get("TRINO_CATALOG", "iceberg")
    trino_schema: str = os.environ.get("TRINO_SCHEMA", "hydrology")

    # Tables
    awlr_table: str = os.environ.get("AWLR_TABLE", "awlr_stations")
    arr_table: str = os.environ.get("ARR_TABLE", "arr_stations")

    log_level: str = os.environ.get("LOG_LEVEL", "INFO").upper()

    def aptech_params(self) -> dict:
        return {
            "idbbws": self.aptech_bbws_id,
            "user": self.aptech_user,
            "pass": self.aptech_password,
        }
