"""Hazard curve calculation for a site.

The calculation runs each source through the pipeline

    FaultSource -> HazardInputs -> HazardGroundMotions -> HazardCurves

rolls the curves of every source in a source set into a `HazardCurveSet`,
and sums the curve sets of the whole model into a `HazardResult`.

Source sets are independent of each other, so they can be computed in
parallel by passing a `concurrent.futures.Executor`. Each source set
writes only to its own builders; the results are combined afterwards and
the totals do not depend on completion order (up to floating point
rounding).
"""

import functools
from concurrent.futures import Executor

from fault_hazard.config import CalcConfig
from fault_hazard.curves import HazardCurveSet, HazardCurveSetBuilder, compute_hazard_curves
from fault_hazard.ground_motions import evaluate_ground_motions
from fault_hazard.result import HazardResult, HazardResultBuilder
from fault_hazard.site import HazardInputs, Site
from fault_hazard.sources import HazardModel, SourceSet


def source_set_curves(
    source_set: SourceSet, site: Site, config: CalcConfig
) -> HazardCurveSet:
    """Compute the hazard curves of every source in a source set.

    Parameters
    ----------
    source_set : SourceSet
        The source set.
    site : Site
        The site.
    config : CalcConfig
        The calculation configuration.

    Returns
    -------
    HazardCurveSet
        The curves of every source, and the source set totals.
    """
    builder = HazardCurveSetBuilder(source_set, config)
    for source in source_set:
        inputs = HazardInputs.from_source(source, site)
        ground_motions = evaluate_ground_motions(inputs, source_set.gmms, config.imts)
        builder.add_curves(compute_hazard_curves(ground_motions, config))
    return builder.build()


def hazard_curve(
    model: HazardModel,
    site: Site,
    config: CalcConfig,
    executor: Executor | None = None,
) -> HazardResult:
    """Compute the hazard curves of a model at a site.

    Parameters
    ----------
    model : HazardModel
        The hazard model.
    site : Site
        The site.
    config : CalcConfig
        The calculation configuration.
    executor : Executor, optional
        If given, source sets are computed with `executor.map`. Otherwise
        they are computed serially.

    Returns
    -------
    HazardResult
        The hazard result. If any source set fails, the error propagates
        and no partial result is returned.
    """
    compute = functools.partial(source_set_curves, site=site, config=config)
    curve_sets = executor.map(compute, model) if executor else map(compute, model)

    builder = HazardResultBuilder(config).model(model).site(site)
    for curve_set in curve_sets:
        builder.add_curve_set(curve_set)
    return builder.build()
