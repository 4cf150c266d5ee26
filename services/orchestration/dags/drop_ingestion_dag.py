"""
Drop Ingestion DAG

Daily workflow that pulls the pending-delete feed, scores and validates
candidates, stores the confirmed ones and refreshes lifecycle statuses.
"""

from datetime import datetime, timedelta
from airflow import DAG
from airflow.operators.python import PythonOperator
from custom_operators import DropIngestionOperator


default_args = {
    "owner": "data-engineering",
    "depends_on_past": False,
    "start_date": datetime(2025, 10, 1),
    "email_on_failure": False,
    "email_on_retry": False,
    "retries": 1,
    "retry_delay": timedelta(minutes=10),
    "execution_timeout": timedelta(hours=4),
}

dag = DAG(
    "drop_ingestion_dag",
    default_args=default_args,
    description="Ingest pending-delete domains from the drop feed",
    schedule="0 6 * * *",
    catchup=False,
    max_active_runs=1,
    tags=["ingestion", "domains", "drops"],
)

run_ingestion = DropIngestionOperator(
    task_id="run_drop_ingestion",
    database_url="{{ var.value.get('dropwatch_database_url', '') }}",
    max_candidates=300,
    dag=dag,
)


def log_ingestion_result(**context):
    """Log the ingestion result pulled from XCom."""
    import structlog

    logger = structlog.get_logger()

    task_instance = context["task_instance"]
    ingestion_result = task_instance.xcom_pull(task_ids="run_drop_ingestion")

    logger.info(
        "Drop ingestion DAG completed",
        logical_date=context["logical_date"].isoformat(),
        status=(ingestion_result or {}).get("status"),
    )


notify_success = PythonOperator(
    task_id="log_ingestion_result",
    python_callable=log_ingestion_result,
    dag=dag,
)

run_ingestion >> notify_success
