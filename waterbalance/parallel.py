"""Parallel multi-object comparison.

Every object is an independent query over read-only input, so objects are
distributed across worker processes without any synchronization. Each worker
receives only the measurements of its own object.
"""

from __future__ import annotations

from collections.abc import Sequence
from multiprocessing import Pool, cpu_count

from tqdm import tqdm

from .analysis import filter_and_aggregate
from .config.settings import AnalyticsSettings, QueryConfig, default_settings
from .hydro.aggregation import AggregatedPoint
from .readers.measurements import Measurement, ordered_objects
from .utils.logger import setup_logger

logger = setup_logger("parallel_comparison")


def _aggregate_worker(
    object_name: str,
    measurements: list[Measurement],
    config: QueryConfig,
    settings: AnalyticsSettings | None,
) -> tuple[str, list[AggregatedPoint] | None]:
    """Worker function for one object.

    Returns:
        Tuple of (object_name, points) or (object_name, None) if the query failed
    """
    try:
        object_config = config.model_copy(update={"object_name": object_name})
        return (object_name, filter_and_aggregate(measurements, object_config, settings))
    except ValueError as e:
        logger.error(f"Aggregation failed for object {object_name}: {e!s}")
        return (object_name, None)


def compare_objects_parallel(
    measurements: Sequence[Measurement],
    config: QueryConfig,
    object_names: Sequence[str] | None = None,
    settings: AnalyticsSettings | None = None,
    n_workers: int | None = None,
    show_progress: bool = True,
) -> dict[str, list[AggregatedPoint]]:
    """Run one query per object across worker processes.

    Args:
        measurements: Full measurement sequence (read-only).
        config: Query applied to every object; its ``object_name`` is replaced.
        object_names: Objects to compare. Defaults to every object in the data,
            in the configured display order.
        settings: Analysis conventions passed to each worker.
        n_workers: Number of processes. Defaults to (CPU count - 1).
        show_progress: Show a progress bar.

    Returns:
        Dict mapping object name -> aggregated points, in ``object_names`` order.
        Objects whose query failed are left out.
    """
    if n_workers is None:
        n_workers = max(1, cpu_count() - 1)

    if object_names is None:
        object_names = ordered_objects(
            measurements, (settings or default_settings.analytics).object_order
        )

    by_object: dict[str, list[Measurement]] = {name: [] for name in object_names}
    for m in measurements:
        if m.object_name in by_object:
            by_object[m.object_name].append(m)

    worker_args = [(name, by_object[name], config, settings) for name in object_names]
    logger.info(f"Comparing {len(worker_args)} objects using {n_workers} workers")

    with Pool(processes=n_workers) as pool:
        if show_progress:
            results = list(
                tqdm(
                    pool.starmap(_aggregate_worker, worker_args),
                    total=len(worker_args),
                    desc="Aggregating objects",
                )
            )
        else:
            results = pool.starmap(_aggregate_worker, worker_args)

    comparison = {name: points for name, points in results if points is not None}
    logger.info(
        f"Comparison complete: {len(comparison)} successful, "
        f"{len(results) - len(comparison)} failed"
    )
    return comparison
