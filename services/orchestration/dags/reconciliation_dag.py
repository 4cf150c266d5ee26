"""
Reconciliation DAG

Hourly sweep that ages stored domains through their lifecycle,
deletes long-dropped records and prunes records outside the drop window.
"""

from datetime import datetime, timedelta
from airflow import DAG
from custom_operators import ReconciliationOperator


default_args = {
    "owner": "data-engineering",
    "depends_on_past": False,
    "start_date": datetime(2025, 10, 1),
    "email_on_failure": False,
    "email_on_retry": False,
    "retries": 2,
    "retry_delay": timedelta(minutes=5),
    "execution_timeout": timedelta(minutes=20),
}

dag = DAG(
    "reconciliation_dag",
    default_args=default_args,
    description="Refresh drop lifecycle statuses and prune the store",
    schedule="0 * * * *",
    catchup=False,
    max_active_runs=1,
    tags=["reconciliation", "domains", "drops"],
)

run_sweep = ReconciliationOperator(
    task_id="run_lifecycle_sweep",
    database_url="{{ var.value.get('dropwatch_database_url', '') }}",
    dag=dag,
)
