"""Fault Hazard

The fault hazard package computes probabilistic seismic hazard curves for
fault sources at a site.

Ruptures
--------

A fault source (`fault_hazard.sources.FaultSource`) grids its surface
(`fault_hazard.surface.GriddedSurface`) and converts each of its
magnitude-frequency distributions (`fault_hazard.mfd`) into discrete
ruptures. Magnitudes that float are sized with a magnitude scaling
relationship (`fault_hazard.magnitude_scaling`) and tiled over the
surface, sharing the magnitude's rate equally between tile positions
(`fault_hazard.ruptures`).

Hazard Curves
-------------

For each rupture and site, a `fault_hazard.site.HazardInput` is evaluated
by the ground-motion models of the source set (`fault_hazard.gmm`). The
moments are collected in write-once matrices
(`fault_hazard.ground_motions`, `fault_hazard.accumulation`), turned into
rate-weighted exceedance curves and rolled up per source set
(`fault_hazard.curves`), and finally summed into the total curves of a
`fault_hazard.result.HazardResult`.

The whole pipeline is driven by `fault_hazard.calc.hazard_curve`, using
the intensity levels and exceedance model of a
`fault_hazard.config.CalcConfig`."""
