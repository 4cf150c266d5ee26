"""Custom Airflow operators for the drop-domain pipeline."""

import os
import subprocess
from typing import Any, Dict, List, Optional

from airflow.exceptions import AirflowException
from airflow.models import BaseOperator
import structlog

logger = structlog.get_logger()


class CommandOperator(BaseOperator):
    """
    Run one of the dropwatch console scripts as a subprocess.

    Subclasses provide the command line; this class handles the
    environment, the timeout and translating failures into
    AirflowException.
    """

    template_fields = ["database_url"]
    command_name = ""
    timeout_seconds = 600

    def __init__(
        self,
        database_url: Optional[str] = None,
        extra_env: Optional[Dict[str, str]] = None,
        *args,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.database_url = database_url
        self.extra_env = extra_env or {}

    def build_command(self) -> List[str]:
        cmd = [self.command_name, "--json-logs"]
        if self.database_url:
            cmd.extend(["--database-url", self.database_url])
        return cmd

    def build_env(self) -> Dict[str, str]:
        env = os.environ.copy()
        env.update(self.extra_env)
        return env

    def execute(self, context: Dict[str, Any]) -> Dict[str, Any]:
        cmd = self.build_command()
        logger.info("Running command", cmd=" ".join(cmd))

        try:
            result = subprocess.run(
                cmd,
                check=True,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
                env=self.build_env(),
            )
        except subprocess.CalledProcessError as e:
            logger.error(
                "Command failed",
                command=self.command_name,
                returncode=e.returncode,
                stderr=e.stderr,
            )
            raise AirflowException(
                f"{self.command_name} failed with code {e.returncode}: {e.stderr}"
            )
        except subprocess.TimeoutExpired:
            raise AirflowException(
                f"{self.command_name} timed out after {self.timeout_seconds} seconds"
            )

        logger.info("Command completed", command=self.command_name)

        return {
            "status": "success",
            "stdout": result.stdout,
            "stderr": result.stderr,
        }


class DropIngestionOperator(CommandOperator):
    """
    Operator to run one ingestion pass over the drop feed.

    Fetches the feed, scores and validates candidates and upserts the
    confirmed ones into the domain store.
    """

    template_fields = ["database_url", "config_path"]
    ui_color = "#80D0FF"
    command_name = "dropwatch-ingest"
    timeout_seconds = 3 * 60 * 60

    def __init__(
        self,
        config_path: Optional[str] = None,
        max_candidates: Optional[int] = None,
        min_score: Optional[int] = None,
        signal_order: Optional[str] = None,
        *args,
        **kwargs,
    ):
        """
        Initialize DropIngestionOperator.

        Args:
            config_path: Path to feed.yaml (None = packaged config)
            max_candidates: Upper bound on candidates sent to validation
            min_score: Quality gate applied before validation
            signal_order: 'whois_first' or 'scrape_first'
        """
        super().__init__(*args, **kwargs)
        self.config_path = config_path
        self.max_candidates = max_candidates
        self.min_score = min_score
        self.signal_order = signal_order

    def build_command(self) -> List[str]:
        cmd = super().build_command()
        if self.config_path:
            cmd.extend(["--config", self.config_path])
        if self.max_candidates is not None:
            cmd.extend(["--max-candidates", str(self.max_candidates)])
        if self.min_score is not None:
            cmd.extend(["--min-score", str(self.min_score)])
        if self.signal_order:
            cmd.extend(["--signal-order", self.signal_order])
        return cmd


class ReconciliationOperator(CommandOperator):
    """Operator to refresh lifecycle statuses and prune the domain store."""

    ui_color = "#90EE90"
    command_name = "dropwatch-reconcile"

    def __init__(self, prune: bool = True, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.prune = prune

    def build_command(self) -> List[str]:
        cmd = super().build_command()
        if not self.prune:
            cmd.append("--no-prune")
        return cmd
