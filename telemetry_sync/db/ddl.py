from ..ingestion.schema import SensorKind

def create_schema(schema: str) -> str:
    return f"""CREATE SCHEMA IF NOT EXISTS {schema}"""

def create_station_table(schema: str, table: str, sensor_kind: SensorKind) -> str:
    # one row per device: the latest reading only
    return f"""
    CREATE TABLE IF NOT EXISTS {schema}.{table} (
        device_id VARCHAR,
        post_name VARCHAR,
        observed_at TIMESTAMP(3) WITH TIME ZONE,
        {sensor_kind.value_field} DOUBLE,
        battery DOUBLE,
        updated_ts BIGINT
    )
    WITH (
        format = 'PARQUET',
        location = 's3://iceberg/{schema}/{table}'
    )
    """
