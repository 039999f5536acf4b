"""Diagnostic tracing that is safe inside jit/vmap/grad.

Traced values are shipped to the host with jax.debug.callback and written to
the standard `spict` logger, so output can be redirected or silenced with the
logging module. Tracing never feeds back into the computation.
"""

from __future__ import annotations

import logging
from functools import partial

import jax
import jax.numpy as jnp
import numpy as np

logger = logging.getLogger("spict")


def _emit(level: int, message: str, **values) -> None:
    formatted = {k: np.asarray(v) for k, v in values.items()}
    logger.log(level, message.format(**formatted))


def trace(dbg: int, level: int, message: str, **values) -> None:
    """Log `message` at DEBUG when the configured verbosity dbg >= level.

    `message` uses str.format placeholders filled from the keyword values.
    dbg and level are static Python ints, so a disabled trace adds nothing to
    the compiled graph.
    """
    if dbg < level:
        return
    if values:
        jax.debug.callback(partial(_emit, logging.DEBUG, message), **values)
    else:
        logger.debug(message)


def _emit_if(message: str, condition, **values) -> None:
    if np.any(condition):
        _emit(logging.WARNING, message, **values)


def warn_if(condition, message: str, **values) -> None:
    """Log `message` at WARNING when any element of the traced `condition` holds.

    The condition is evaluated on the host, so batched (vmapped) conditions
    behave the same as scalar ones.
    """
    jax.debug.callback(partial(_emit_if, message), jnp.asarray(condition), **values)
