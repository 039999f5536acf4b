"""Observation data and time grid for the surplus-production model.

SpictData holds everything that is fixed across likelihood evaluations:
the knot grid, the catch and index observations, and the seasonal flags.
All index arithmetic is resolved here, once, in NumPy:

- 1-based catch spans (ic, nc) become a padded (n_catch, max_span) gather
  matrix plus a validity mask, so aggregation is a static gather + masked sum.
- 1-based index knots (ii) become 0-based knot indices.
- Missing index observations (I <= 0) become a boolean mask; their log is
  never taken.

Structural problems (length mismatches, spans or knots out of range, an
unusable delay) raise SpictDataError before any likelihood work happens.
Numeric problems in the parameters are not checked here; they surface as a
non-finite negative log-likelihood.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from spict.params import SpictParams


class SpictDataError(ValueError):
    """Structural inconsistency in the model inputs."""


def _as_float_array(name: str, values) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float64)
    if arr.ndim != 1:
        raise SpictDataError(f"{name} must be one-dimensional, got shape {arr.shape}")
    return arr


def _as_index_array(name: str, values) -> np.ndarray:
    """Convert float-typed index vectors to int64, rejecting fractional entries."""
    arr = _as_float_array(name, values)
    if not np.all(np.isfinite(arr)) or not np.all(arr == np.round(arr)):
        raise SpictDataError(f"{name} must contain integers, got {arr}")
    return arr.astype(np.int64)


@dataclass(frozen=True, eq=False)
class SpictData:
    """Validated, 0-based model inputs.

    Attributes:
        delay: Lag of the fishing-mortality autoregression (>= 1).
        dt: (ns-1,) interval lengths between consecutive knots.
        dtpred: Forecast horizon beyond the last knot.
        isum: (ns,) boolean seasonal flags selecting the gamma*r growth rate.
        catch_obs: (n_catch,) observed catches.
        catch_start: (n_catch,) 0-based first sub-interval of each catch period.
        catch_count: (n_catch,) number of sub-intervals in each catch period.
        catch_gather: (n_catch, max_span) sub-interval indices; padded slots repeat
            the row's first sub-interval so no row depends on sub-intervals
            outside its own span.
        catch_mask: (n_catch, max_span) True where catch_gather is a real entry.
        index_obs: (n_index,) observed index values, missing entries <= 0.
        index_knot: (n_index,) 0-based knot of each index observation.
        index_observed: (n_index,) True where index_obs > 0.
        log_index: (n_index,) log(index_obs) where observed, 0 elsewhere.
    """

    delay: int
    dt: np.ndarray
    dtpred: float
    isum: np.ndarray
    catch_obs: np.ndarray
    catch_start: np.ndarray
    catch_count: np.ndarray
    catch_gather: np.ndarray
    catch_mask: np.ndarray
    index_obs: np.ndarray
    index_knot: np.ndarray
    index_observed: np.ndarray
    log_index: np.ndarray

    @property
    def ns(self) -> int:
        """Number of state knots."""
        return self.dt.shape[0] + 1

    @property
    def n_catch(self) -> int:
        return self.catch_obs.shape[0]

    @property
    def n_index(self) -> int:
        return self.index_obs.shape[0]

    @classmethod
    def from_arrays(
        cls,
        *,
        delay: int,
        dt,
        dtpred: float,
        Cobs,
        ic,
        nc,
        I,  # noqa: E741
        ii,
        isum,
    ) -> SpictData:
        """Validate raw (1-based) model inputs and resolve their index mappings.

        Args:
            delay: Lag of the F autoregression.
            dt: (ns-1,) time between knot i and i+1.
            dtpred: Forecast horizon.
            Cobs: Observed catches.
            ic: 1-based first sub-interval of each catch observation.
            nc: Number of sub-intervals each catch observation spans.
            I: Abundance index, <= 0 marks a missing observation.
            ii: 1-based knot of each index observation.
            isum: (ns,) 0/1 seasonal indicator.

        Raises:
            SpictDataError: On any length, range or lag inconsistency, and on
                non-positive or non-finite Cobs (raised here, not returned as a
                non-finite negative log-likelihood).
        """
        dt = _as_float_array("dt", dt)
        ns = dt.shape[0] + 1
        if not np.all(np.isfinite(dt)) or np.any(dt < 0):
            raise SpictDataError("dt must be finite and non-negative")

        isum_arr = _as_index_array("isum", isum)
        if isum_arr.shape[0] != ns:
            raise SpictDataError(f"isum has length {isum_arr.shape[0]}, expected ns={ns}")

        delay = int(delay)
        if delay < 1 or delay > ns:
            raise SpictDataError(
                f"delay must satisfy 1 <= delay <= ns={ns}, got {delay}; "
                "delay=0 makes the F autoregression self-referential"
            )

        dtpred = float(dtpred)
        if not np.isfinite(dtpred):
            raise SpictDataError("dtpred must be finite")

        # --- Catch observations ---
        catch_obs = _as_float_array("Cobs", Cobs)
        ic_arr = _as_index_array("ic", ic)
        nc_arr = _as_index_array("nc", nc)
        if not (catch_obs.shape[0] == ic_arr.shape[0] == nc_arr.shape[0]):
            raise SpictDataError(
                f"Cobs, ic and nc must have equal length, got "
                f"{catch_obs.shape[0]}, {ic_arr.shape[0]}, {nc_arr.shape[0]}"
            )
        if np.any(~np.isfinite(catch_obs)) or np.any(catch_obs <= 0):
            raise SpictDataError("Cobs must be finite and strictly positive")

        catch_start = ic_arr - 1  # 1-based input
        if np.any(nc_arr < 1):
            raise SpictDataError(f"nc entries must be >= 1, got {nc_arr}")
        catch_end = catch_start + nc_arr
        bad = (catch_start < 0) | (catch_end > ns - 1)
        if np.any(bad):
            first = int(np.flatnonzero(bad)[0])
            raise SpictDataError(
                f"catch observation {first} spans sub-intervals "
                f"[{catch_start[first]}, {catch_end[first]}) outside [0, {ns - 1})"
            )

        max_span = int(nc_arr.max()) if nc_arr.size else 1
        offsets = np.arange(max_span)
        catch_mask = offsets[None, :] < nc_arr[:, None]
        catch_gather = np.where(
            catch_mask, catch_start[:, None] + offsets[None, :], catch_start[:, None]
        )

        # --- Index observations ---
        index_obs = _as_float_array("I", I)
        ii_arr = _as_index_array("ii", ii)
        if index_obs.shape[0] != ii_arr.shape[0]:
            raise SpictDataError(
                f"I and ii must have equal length, got {index_obs.shape[0]}, {ii_arr.shape[0]}"
            )
        index_knot = ii_arr - 1
        bad = (index_knot < 0) | (index_knot >= ns)
        if np.any(bad):
            first = int(np.flatnonzero(bad)[0])
            raise SpictDataError(
                f"index observation {first} maps to knot {index_knot[first]} outside [0, {ns})"
            )
        index_observed = index_obs > 0
        log_index = np.log(np.where(index_observed, index_obs, 1.0))

        return cls(
            delay=delay,
            dt=dt,
            dtpred=dtpred,
            isum=isum_arr == 1,
            catch_obs=catch_obs,
            catch_start=catch_start,
            catch_count=nc_arr,
            catch_gather=catch_gather.astype(np.int64),
            catch_mask=catch_mask,
            index_obs=index_obs,
            index_knot=index_knot,
            index_observed=index_observed,
            log_index=log_index,
        )

    def check_params(self, params: SpictParams) -> None:
        """Check that the latent state vectors match the knot grid.

        Shapes are static under jax.jit, so this is safe inside traced code.
        """
        for name in ("logF", "logB"):
            shape = np.shape(getattr(params, name))
            if shape != (self.ns,):
                raise SpictDataError(f"{name} has shape {shape}, expected ({self.ns},)")

    def without_catch(self, i: int) -> SpictData:
        """Copy of this data set with catch observation i removed."""
        keep = np.arange(self.n_catch) != i
        return SpictData.from_arrays(
            delay=self.delay,
            dt=self.dt,
            dtpred=self.dtpred,
            Cobs=self.catch_obs[keep],
            ic=self.catch_start[keep] + 1,
            nc=self.catch_count[keep],
            I=self.index_obs,
            ii=self.index_knot + 1,
            isum=self.isum.astype(np.int64),
        )

    def without_index(self, i: int) -> SpictData:
        """Copy of this data set with index observation i removed."""
        keep = np.arange(self.n_index) != i
        return SpictData.from_arrays(
            delay=self.delay,
            dt=self.dt,
            dtpred=self.dtpred,
            Cobs=self.catch_obs,
            ic=self.catch_start + 1,
            nc=self.catch_count,
            I=self.index_obs[keep],
            ii=self.index_knot[keep] + 1,
            isum=self.isum.astype(np.int64),
        )
