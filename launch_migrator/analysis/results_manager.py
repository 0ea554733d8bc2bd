#!/usr/bin/env python3
"""
Migration Results Storage

Numbered run directories holding results JSON, run metadata, sweep
tables and charts for migration runs.
"""

import json
import threading
from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd


@dataclass
class RunMetadata:
    """Metadata for a single migration run or sweep"""
    run_id: str
    run_name: str
    timestamp: str
    parameters: Dict[str, Any]
    execution_time: float
    status: str = "completed"


class ResultsManager:
    """Creates run directories and persists migration outputs"""

    def __init__(self, base_results_dir: str = "results"):
        self.base_results_dir = Path(base_results_dir)
        self._lock = threading.Lock()
        self.base_results_dir.mkdir(parents=True, exist_ok=True)

    def create_run_directory(self, run_name: str) -> Path:
        """
        Create results/<run_name>/run_NNN_<timestamp> with a charts/ subdirectory

        Args:
            run_name: Name grouping related runs (usually the config name)

        Returns:
            Path to the new run directory
        """
        with self._lock:
            group_dir = self.base_results_dir / run_name
            group_dir.mkdir(exist_ok=True)

            run_number = self._next_run_number(group_dir)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

            run_dir = group_dir / f"run_{run_number:03d}_{timestamp}"
            run_dir.mkdir(exist_ok=True)
            (run_dir / "charts").mkdir(exist_ok=True)
            return run_dir

    def _next_run_number(self, group_dir: Path) -> int:
        numbers = []
        for run_dir in group_dir.iterdir():
            parts = run_dir.name.split("_")
            if run_dir.is_dir() and len(parts) >= 2 and parts[0] == "run" and parts[1].isdigit():
                numbers.append(int(parts[1]))
        return max(numbers) + 1 if numbers else 1

    def save_results(self, run_dir: Path, results: Dict[str, Any], metadata: RunMetadata) -> Path:
        """Write results.json and metadata.json"""
        results_file = run_dir / "results.json"
        with open(results_file, 'w') as f:
            json.dump(self._make_serializable(results), f, indent=2)

        with open(run_dir / "metadata.json", 'w') as f:
            json.dump(self._make_serializable(asdict(metadata)), f, indent=2)

        return results_file

    def save_table(self, run_dir: Path, df: pd.DataFrame, name: str = "price_sweep") -> Path:
        """Write a DataFrame as CSV; big integers are kept exact as strings"""
        table_file = run_dir / f"{name}.csv"
        df.astype(object).to_csv(table_file, index=False)
        return table_file

    def save_summary_report(self, run_dir: Path, summary: Dict[str, Any]) -> Path:
        summary_file = run_dir / "summary.md"
        with open(summary_file, 'w') as f:
            f.write(self._generate_markdown_summary(summary, run_dir))
        return summary_file

    def _generate_markdown_summary(self, summary: Dict[str, Any], run_dir: Path) -> str:
        md_content = ["# Migration Run Summary\n"]

        if "metadata" in summary:
            metadata = summary["metadata"]
            md_content.append("## Run Information")
            md_content.append(f"- **Run**: {metadata.get('run_name', 'Unknown')}")
            md_content.append(f"- **Timestamp**: {metadata.get('timestamp', 'Unknown')}")
            md_content.append(f"- **Execution Time**: {metadata.get('execution_time', 0):.2f}s")
            md_content.append("")

        if "migration" in summary:
            md_content.append("## Migration")
            for key, value in summary["migration"].items():
                if isinstance(value, list):
                    value = ", ".join(str(v) for v in value)
                md_content.append(f"- **{key.replace('_', ' ').title()}**: {value}")
            md_content.append("")

        if "sweep_statistics" in summary:
            md_content.append("## Price Sweep")
            for key, value in summary["sweep_statistics"].items():
                if isinstance(value, float) and key.endswith("_rate"):
                    md_content.append(f"- **{key.replace('_', ' ').title()}**: {value:.1%}")
                else:
                    md_content.append(f"- **{key.replace('_', ' ').title()}**: {value}")
            md_content.append("")

        charts = sorted((run_dir / "charts").glob("*.png"))
        if charts:
            md_content.append("## Generated Charts")
            for chart in charts:
                md_content.append(f"- `charts/{chart.name}`")

        return "\n".join(md_content)

    def list_runs(self, run_name: str) -> List[Dict[str, Any]]:
        """All runs stored under a name, oldest first"""
        group_dir = self.base_results_dir / run_name
        if not group_dir.exists():
            return []

        runs = []
        for run_dir in group_dir.iterdir():
            if not run_dir.is_dir() or not run_dir.name.startswith("run_"):
                continue
            metadata = self.load_metadata(run_dir)
            entry = {"run_id": run_dir.name, "path": str(run_dir), "run_name": run_name}
            if metadata is not None:
                entry.update(asdict(metadata))
                entry["run_id"] = run_dir.name
            runs.append(entry)

        runs.sort(key=lambda x: x["run_id"])
        return runs

    def list_run_names(self) -> List[str]:
        return sorted(
            item.name for item in self.base_results_dir.iterdir()
            if item.is_dir() and not item.name.startswith('.')
        )

    def load_results(self, run_path: Path) -> Optional[Dict[str, Any]]:
        results_file = Path(run_path) / "results.json"
        if not results_file.exists():
            return None
        with open(results_file, 'r') as f:
            return json.load(f)

    def load_metadata(self, run_path: Path) -> Optional[RunMetadata]:
        metadata_file = Path(run_path) / "metadata.json"
        if not metadata_file.exists():
            return None
        with open(metadata_file, 'r') as f:
            return RunMetadata(**json.load(f))

    def _make_serializable(self, obj: Any) -> Any:
        """Convert results to JSON-friendly values"""
        if isinstance(obj, (bytes, bytearray)):
            return "0x" + bytes(obj).hex()
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, bool) or obj is None or isinstance(obj, (int, str)):
            return obj
        if hasattr(obj, 'tolist'):  # numpy arrays and scalars
            return obj.tolist()
        if isinstance(obj, float):
            return obj
        if isinstance(obj, dict):
            return {str(self._make_serializable(k)): self._make_serializable(v) for k, v in obj.items()}
        if isinstance(obj, (list, tuple, set, frozenset)):
            return [self._make_serializable(item) for item in obj]
        if hasattr(obj, 'to_dict'):
            return self._make_serializable(obj.to_dict())
        return str(obj)
