"""
Workflow orchestrator for executing config-driven workflows.

Supports YAML/JSON workflow definitions with steps, dependencies, and
parameters. A workflow looks like::

    config: settings.yaml        # optional
    stop_on_error: true
    steps:
      - name: roads
        type: read_lines
        params: {path: roads.gpkg}
      - name: net
        type: build_network
        params: {lines: "${roads}", directed: false}
      - name: route
        type: shortest_path
        depends_on: [net]
        params: {network: "${net}", source: 0, target: 5}
"""

import inspect
import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pandas as pd
import yaml

from tracksmith.config import ConfigManager, load_config, resolve_config
from tracksmith.objects.lineset import LineSet
from tracksmith.objects.network import SpatialNetwork
from tracksmith.primitives import crs as crs_ops
from tracksmith.primitives import network as network_ops
from tracksmith.primitives import tracks as track_ops
from tracksmith.workflows import io as io_ops

logger = logging.getLogger(__name__)


# Registry of available workflow steps
STEP_REGISTRY: dict[str, Callable] = {}


def register_step(name: str, func: Callable):
    """Register a function as a workflow step."""
    STEP_REGISTRY[name] = func
    logger.debug(f"Registered workflow step: {name}")


def _build_network(
    lines: LineSet,
    directed: bool | None = None,
    precision: int | None = None,
    simplify: bool | None = None,
    config: ConfigManager | None = None,
) -> SpatialNetwork:
    """Workflow wrapper around lines_to_network with config defaults."""
    cfg = resolve_config(config)
    directed = cfg.get("network.directed", True) if directed is None else directed
    precision = cfg.get("network.precision") if precision is None else precision
    simplify = cfg.get("network.simplify", False) if simplify is None else simplify
    network = network_ops.lines_to_network(lines, directed=directed, precision=precision)
    if simplify:
        network = network_ops.simplify_network(network)
    return network


def _build_tracks(
    observations: pd.DataFrame,
    config: ConfigManager | None = None,
    **overrides: Any,
) -> LineSet:
    settings = resolve_config(config).section("tracks")
    settings.update(overrides)
    return track_ops.build_tracks(observations, **settings)


def _build_track_segments(
    observations: pd.DataFrame,
    config: ConfigManager | None = None,
    **overrides: Any,
) -> LineSet:
    settings = resolve_config(config).section("tracks")
    settings.pop("min_points", None)
    settings.update(overrides)
    return track_ops.build_track_segments(observations, **settings)


def _to_wkt(
    crs: Any,
    version: str | None = None,
    pretty: bool = False,
    config: ConfigManager | None = None,
) -> str:
    version = version or resolve_config(config).get("crs.wkt_version", "WKT2_2019")
    return crs_ops.to_wkt(crs, version=version, pretty=pretty)


def _register_default_steps():
    """Register default workflow steps."""
    # Data loading and saving
    register_step("read_lines", io_ops.read_lines)
    register_step("read_points", io_ops.read_points)
    register_step("read_storm_observations", io_ops.read_storm_observations)
    register_step("write_vector", io_ops.write_vector)
    register_step("network_to_geodataframes", io_ops.network_to_geodataframes)

    # CRS
    register_step("describe_crs", crs_ops.describe_crs)
    register_step("to_wkt", _to_wkt)
    register_step("to_proj4", crs_ops.to_proj4)
    register_step("transform_crs", crs_ops.reproject_lines)
    register_step("transform_points", crs_ops.reproject_points)

    # Networks
    register_step("build_network", _build_network)
    register_step("simplify_network", network_ops.simplify_network)
    register_step("largest_component", network_ops.largest_component)
    register_step("shortest_path", network_ops.shortest_path)
    register_step("node_centrality", network_ops.node_centrality)
    register_step("edge_betweenness", network_ops.edge_betweenness)

    # Storm tracks
    register_step("build_tracks", _build_tracks)
    register_step("build_track_segments", _build_track_segments)
    register_step("track_summary", track_ops.track_summary)


# Initialize default steps
_register_default_steps()


class WorkflowOrchestrator:
    """
    Run network, CRS and storm-track steps described in a workflow file.

    Step outputs are kept in ``results`` under the step name so later steps
    can reference them as ``${name}`` or ``${name.attribute}``.
    """

    def __init__(
        self, config: ConfigManager | None = None, working_dir: str | Path | None = None
    ):
        """
        Parameters
        ----------
        config : ConfigManager, optional
            Settings injected into steps that accept ``config``. The global
            configuration is used when None.
        working_dir : str or Path, optional
            Directory that relative input and output paths refer to
        """
        self.config = config
        self.working_dir = Path(working_dir) if working_dir else Path.cwd()
        self.results: dict[str, Any] = {}
        self.logger = logging.getLogger(self.__class__.__name__)

    def load_workflow_file(self, file_path: str | Path) -> dict[str, Any]:
        """
        Load workflow definition from file.

        Parameters
        ----------
        file_path : str or Path
            Path to YAML or JSON workflow file

        Returns
        -------
        dict
            Workflow definition

        Raises
        ------
        FileNotFoundError
            If file doesn't exist
        ValueError
            If file format is unsupported
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"Workflow file not found: {file_path}")

        suffix = file_path.suffix.lower()

        with open(file_path) as f:
            if suffix in (".yaml", ".yml"):
                workflow = yaml.safe_load(f)
            elif suffix == ".json":
                workflow = json.load(f)
            else:
                raise ValueError(
                    f"Unsupported workflow file format: {suffix}. "
                    "Use .yaml, .yml, or .json"
                )

        self.logger.info(f"Loaded workflow from {file_path}")
        return workflow

    @staticmethod
    def _step_name(step: dict[str, Any], index: int) -> str:
        return step.get("name") or step.get("step") or f"step_{index}"

    def _resolve_dependencies(
        self, steps: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        """
        Order steps so each runs after the steps it depends on.

        Dependencies come from an explicit ``depends_on`` list. Steps
        without dependencies keep their file order.

        Raises
        ------
        ValueError
            If a dependency is unknown or the dependencies form a cycle
        """
        names = [self._step_name(step, i) for i, step in enumerate(steps)]
        by_name = dict(zip(names, steps))
        if len(by_name) != len(steps):
            raise ValueError(f"Duplicate step names in workflow: {names}")

        ordered: list[dict[str, Any]] = []
        state: dict[str, str] = {}

        def visit(name: str, chain: tuple[str, ...]) -> None:
            if state.get(name) == "done":
                return
            if state.get(name) == "visiting":
                cycle = " -> ".join(chain + (name,))
                raise ValueError(f"Circular step dependencies: {cycle}")
            state[name] = "visiting"
            deps = by_name[name].get("depends_on", [])
            if isinstance(deps, str):
                deps = [deps]
            for dep in deps:
                if dep not in by_name:
                    raise ValueError(f"Step '{name}' depends on unknown step '{dep}'")
                visit(dep, chain + (name,))
            state[name] = "done"
            ordered.append({**by_name[name], "name": name})

        for name in names:
            visit(name, ())
        return ordered

    def _resolve_parameter(self, value: Any, step_name: str) -> Any:
        """
        Resolve parameter value, supporting references to previous steps.

        Parameters
        ----------
        value : any
            Parameter value (may be string reference like "${step_name.output}")
        step_name : str
            Current step name

        Returns
        -------
        any
            Resolved value
        """
        if not (isinstance(value, str) and value.startswith("${") and value.endswith("}")):
            return value

        ref = value[2:-1]

        if ref.startswith("config."):
            config_key = ref[len("config."):]
            resolved = resolve_config(self.config).get(config_key)
            if resolved is None:
                raise ValueError(
                    f"Config key '{config_key}' referenced by step '{step_name}' "
                    "is not set"
                )
            return resolved

        if "." in ref:
            step_ref, attr = ref.split(".", 1)
        else:
            step_ref, attr = ref, "output"

        if step_ref not in self.results:
            raise ValueError(
                f"Step '{step_ref}' not found in results (referenced by {value})"
            )

        result = self.results[step_ref]
        if attr == "output":
            return result
        if isinstance(result, pd.DataFrame):
            if attr in result.columns:
                return result[attr]
            raise ValueError(
                f"Column '{attr}' not found in step '{step_ref}' output. "
                f"Available columns: {list(result.columns)}"
            )
        if isinstance(result, dict) and attr in result:
            return result[attr]
        if isinstance(result, (tuple, list)) and attr.isdigit():
            return result[int(attr)]
        if hasattr(result, attr):
            return getattr(result, attr)
        raise ValueError(
            f"Reference {value} not found in step '{step_ref}'. "
            f"Result type: {type(result)}"
        )

    def _resolve_parameters(
        self, params: dict[str, Any], step_name: str
    ) -> dict[str, Any]:
        """Resolve all parameters in a dictionary, including nested ones."""
        return {
            key: self._resolve_nested(value, step_name) for key, value in params.items()
        }

    def _resolve_nested(self, value: Any, step_name: str) -> Any:
        if isinstance(value, dict):
            return self._resolve_parameters(value, step_name)
        if isinstance(value, list):
            return [self._resolve_nested(item, step_name) for item in value]
        return self._resolve_parameter(value, step_name)

    def _resolve_paths(self, params: dict[str, Any]) -> dict[str, Any]:
        # Relative file paths are taken relative to the working directory
        for key in ("path", "source", "output_path"):
            value = params.get(key)
            if isinstance(value, str) and "://" not in value and not Path(value).is_absolute():
                params[key] = str(self.working_dir / value)
        return params

    def _execute_step(self, step: dict[str, Any], step_index: int) -> Any:
        """Look up, parameterize and run one step, storing its output."""
        step_name = self._step_name(step, step_index)
        step_type = step.get("type") or step.get("function")

        if not step_type:
            raise ValueError(f"Step {step_name} missing 'type' or 'function' field")

        self.logger.info(f"Executing step {step_index + 1}: {step_name} ({step_type})")

        func = STEP_REGISTRY.get(step_type)
        if func is None:
            raise ValueError(
                f"Unknown step type: {step_type}. "
                f"Available: {sorted(STEP_REGISTRY)}"
            )

        params = step.get("params", step.get("parameters", {})) or {}
        params = self._resolve_parameters(params, step_name)
        if step_type.startswith(("read_", "write_")):
            params = self._resolve_paths(params)

        sig = inspect.signature(func)
        if "config" in sig.parameters:
            params["config"] = self.config

        try:
            result = func(**params)
        except Exception as e:
            self.logger.error(f"Step {step_name} failed: {e}")
            raise
        self.results[step_name] = result
        self.logger.info(f"Step {step_name} completed")
        return result

    def _load_workflow_config(self, config_file: str) -> None:
        config_path = Path(config_file)
        if not config_path.is_absolute():
            config_path = self.working_dir / config_path
        if config_path.exists():
            self.config = load_config(config_path)
        else:
            self.logger.warning(f"Config file not found: {config_file}, using defaults")

    def execute(self, workflow: dict[str, Any]) -> dict[str, Any]:
        """
        Execute a workflow definition.

        Parameters
        ----------
        workflow : dict
            Workflow definition with 'steps' list

        Returns
        -------
        dict
            Results from all steps, keyed by step name
        """
        self.logger.info("Starting workflow execution")

        config_file = workflow.get("config")
        if config_file:
            self._load_workflow_config(config_file)

        steps = workflow.get("steps", [])
        if not steps:
            raise ValueError("Workflow must contain 'steps' list")

        ordered_steps = self._resolve_dependencies(steps)

        failures = 0
        for i, step in enumerate(ordered_steps):
            try:
                self._execute_step(step, i)
            except Exception as e:
                failures += 1
                self.logger.error(f"Workflow failed at step {i + 1}: {e}")
                if workflow.get("stop_on_error", True):
                    raise

        if failures:
            self.logger.warning(
                f"Workflow finished with {failures} failed step(s) of {len(steps)}"
            )
        else:
            self.logger.info(f"Workflow completed successfully ({len(steps)} steps)")
        return self.results

    def execute_file(self, file_path: str | Path) -> dict[str, Any]:
        """Read a YAML/JSON workflow file and execute it."""
        workflow = self.load_workflow_file(file_path)
        return self.execute(workflow)


def run_workflow(
    workflow_file: str | Path,
    config: ConfigManager | None = None,
    working_dir: str | Path | None = None,
) -> dict[str, Any]:
    """
    Convenience function to run a workflow from a file.

    Parameters
    ----------
    workflow_file : str or Path
        Path to workflow YAML/JSON file
    config : ConfigManager, optional
        Configuration manager
    working_dir : str or Path, optional
        Working directory, defaults to the workflow file's directory

    Returns
    -------
    dict
        Results from all steps

    Example
    -------
    >>> from tracksmith.workflows import run_workflow
    >>> results = run_workflow("routing.yaml")
    """
    workflow_file = Path(workflow_file)
    orchestrator = WorkflowOrchestrator(
        config=config, working_dir=working_dir or workflow_file.parent
    )
    return orchestrator.execute_file(workflow_file)


def load_workflow(file_path: str | Path) -> dict[str, Any]:
    """Read a workflow definition (e.g. to inspect or edit it) without running it."""
    orchestrator = WorkflowOrchestrator()
    return orchestrator.load_workflow_file(file_path)
