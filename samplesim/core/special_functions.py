"""Numerical special functions used by the confidence estimators.

The routines here are self-contained: inverse standard normal CDF, gamma and
log-gamma, the beta function and the regularized incomplete beta function
with its inverse.
"""

from __future__ import annotations

import math

from .validator import DomainError

# Rational approximation to the inverse normal CDF (Beasley-Springer-Moro /
# Acklam coefficients), split into lower tail, central region and upper tail.
_NORM_A = (
    -3.969683028665376e01,
    2.209460984245205e02,
    -2.759285104469687e02,
    1.383577518672690e02,
    -3.066479806614716e01,
    2.506628277459239e00,
)
_NORM_B = (
    -5.447609879822406e01,
    1.615858368580409e02,
    -1.556989798598866e02,
    6.680131188771972e01,
    -1.328068155288572e01,
)
_NORM_C = (
    -7.784894002430293e-03,
    -3.223964580411365e-01,
    -2.400758277161838e00,
    -2.549732539343734e00,
    4.374664141464968e00,
    2.938163982698783e00,
)
_NORM_D = (
    7.784695709041462e-03,
    3.224671290700398e-01,
    2.445134137142996e00,
    3.754408661907416e00,
)
_P_LOW = 0.02425
_P_HIGH = 1.0 - _P_LOW

_LANCZOS_G = 7.0
_LANCZOS_COEFFICIENTS = (
    0.99999999999980993,
    676.5203681218851,
    -1259.1392167224028,
    771.32342877765313,
    -176.61502916214059,
    12.507343278686905,
    -0.13857109526572012,
    9.9843695780195716e-6,
    1.5056327351493116e-7,
)
_STIRLING_THRESHOLD = 12.0
_HALF_LOG_TWO_PI = 0.5 * math.log(2.0 * math.pi)

_CF_MAX_ITERATIONS = 10_000
_CF_EPSILON = 1e-14
_CF_TINY = 1e-300

BETA_INVERSE_MAX_ITERATIONS = 20
BETA_INVERSE_TOLERANCE = 1e-10


def _tail_ratio(q: float) -> float:
    c, d = _NORM_C, _NORM_D
    numerator = ((((c[0] * q + c[1]) * q + c[2]) * q + c[3]) * q + c[4]) * q + c[5]
    denominator = (((d[0] * q + d[1]) * q + d[2]) * q + d[3]) * q + 1.0
    return numerator / denominator


def normal_inverse(p: float) -> float:
    """Return the standard normal quantile for probability ``p``.

    Raises
    ------
    DomainError
        If ``p`` is not strictly between 0 and 1.
    """
    p = float(p)
    if not 0.0 < p < 1.0:
        raise DomainError(f"normal_inverse requires 0 < p < 1, got {p}")

    if p < _P_LOW:
        return _tail_ratio(math.sqrt(-2.0 * math.log(p)))
    if p > _P_HIGH:
        return -_tail_ratio(math.sqrt(-2.0 * math.log(1.0 - p)))

    a, b = _NORM_A, _NORM_B
    q = p - 0.5
    r = q * q
    numerator = (((((a[0] * r + a[1]) * r + a[2]) * r + a[3]) * r + a[4]) * r + a[5]) * q
    denominator = ((((b[0] * r + b[1]) * r + b[2]) * r + b[3]) * r + b[4]) * r + 1.0
    return numerator / denominator


def _is_non_positive_integer(x: float) -> bool:
    return x <= 0.0 and x == math.floor(x)


def log_gamma(x: float) -> float:
    """Natural log of ``|Gamma(x)|``."""
    x = float(x)
    if _is_non_positive_integer(x):
        raise DomainError(f"log_gamma is undefined at non-positive integer {x}")

    if x < 0.5:
        # Reflection: Gamma(x) Gamma(1 - x) = pi / sin(pi x)
        return math.log(math.pi / abs(math.sin(math.pi * x))) - log_gamma(1.0 - x)

    if x >= _STIRLING_THRESHOLD:
        inv = 1.0 / x
        inv2 = inv * inv
        series = inv * (
            1.0 / 12.0
            - inv2 * (1.0 / 360.0 - inv2 * (1.0 / 1260.0 - inv2 / 1680.0))
        )
        return (x - 0.5) * math.log(x) - x + _HALF_LOG_TWO_PI + series

    shifted = x - 1.0
    acc = _LANCZOS_COEFFICIENTS[0]
    for idx in range(1, len(_LANCZOS_COEFFICIENTS)):
        acc += _LANCZOS_COEFFICIENTS[idx] / (shifted + idx)
    t = shifted + _LANCZOS_G + 0.5
    return _HALF_LOG_TWO_PI + (shifted + 0.5) * math.log(t) - t + math.log(acc)


def gamma(x: float) -> float:
    """Gamma function; overflows (``OverflowError``) above roughly 171.6."""
    x = float(x)
    if _is_non_positive_integer(x):
        raise DomainError(f"gamma is undefined at non-positive integer {x}")
    if x < 0.5:
        return math.pi / (math.sin(math.pi * x) * gamma(1.0 - x))
    return math.exp(log_gamma(x))


def _check_shapes(alpha: float, beta: float) -> None:
    if not (alpha > 0.0 and beta > 0.0) or not (math.isfinite(alpha) and math.isfinite(beta)):
        raise DomainError(f"Beta shape parameters must be positive, got ({alpha}, {beta})")


def log_beta(alpha: float, beta: float) -> float:
    _check_shapes(alpha, beta)
    return log_gamma(alpha) + log_gamma(beta) - log_gamma(alpha + beta)


def beta_function(alpha: float, beta: float) -> float:
    """Complete beta function B(alpha, beta)."""
    return math.exp(log_beta(alpha, beta))


def beta_pdf(x: float, alpha: float, beta: float) -> float:
    """Density of the Beta(alpha, beta) distribution."""
    _check_shapes(alpha, beta)
    if x < 0.0 or x > 1.0:
        return 0.0
    if x == 0.0 or x == 1.0:
        exponent = alpha - 1.0 if x == 0.0 else beta - 1.0
        if exponent > 0.0:
            return 0.0
        if exponent == 0.0:
            return 1.0 / beta_function(alpha, beta)
        return math.inf
    log_density = (
        (alpha - 1.0) * math.log(x)
        + (beta - 1.0) * math.log1p(-x)
        - log_beta(alpha, beta)
    )
    return math.exp(log_density)


def _beta_continued_fraction(x: float, alpha: float, beta: float) -> float:
    """Evaluate I_x(alpha, beta) with the modified Lentz algorithm."""
    qab = alpha + beta
    qap = alpha + 1.0
    qam = alpha - 1.0

    c = 1.0
    d = 1.0 - qab * x / qap
    if abs(d) < _CF_TINY:
        d = _CF_TINY
    d = 1.0 / d
    h = d

    for m in range(1, _CF_MAX_ITERATIONS + 1):
        m2 = 2 * m
        # Even step
        aa = m * (beta - m) * x / ((qam + m2) * (alpha + m2))
        d = 1.0 + aa * d
        if abs(d) < _CF_TINY:
            d = _CF_TINY
        c = 1.0 + aa / c
        if abs(c) < _CF_TINY:
            c = _CF_TINY
        d = 1.0 / d
        h *= d * c

        # Odd step
        aa = -(alpha + m) * (qab + m) * x / ((alpha + m2) * (qap + m2))
        d = 1.0 + aa * d
        if abs(d) < _CF_TINY:
            d = _CF_TINY
        c = 1.0 + aa / c
        if abs(c) < _CF_TINY:
            c = _CF_TINY
        d = 1.0 / d
        delta = d * c
        h *= delta
        if abs(delta - 1.0) < _CF_EPSILON:
            break
    else:
        raise DomainError(
            f"incomplete_beta did not converge for x={x}, alpha={alpha}, beta={beta}"
        )

    log_front = alpha * math.log(x) + beta * math.log1p(-x) - log_beta(alpha, beta)
    return math.exp(log_front) * h / alpha


def incomplete_beta(x: float, alpha: float, beta: float) -> float:
    """Regularized incomplete beta function I_x(alpha, beta).

    Values of ``x`` at or beyond the ends of [0, 1] map to 0 and 1.
    """
    _check_shapes(alpha, beta)
    x = float(x)
    if x <= 0.0:
        return 0.0
    if x >= 1.0:
        return 1.0
    if x >= (alpha + 1.0) / (alpha + beta + 2.0):
        return 1.0 - _beta_continued_fraction(1.0 - x, beta, alpha)
    return _beta_continued_fraction(x, alpha, beta)


def _initial_beta_guess(p: float, alpha: float, beta: float) -> float:
    total = alpha + beta
    mean = alpha / total
    std = math.sqrt(alpha * beta / (total * total * (total + 1.0)))
    guess = mean + std * normal_inverse(p)
    # Outside (0, 1) the normal approximation is useless; use the power-law
    # tails I_x ~ x^a / (a B) near 0 and 1 - I_x ~ (1 - x)^b / (b B) near 1.
    if guess <= 0.0:
        guess = math.exp((math.log(p * alpha) + log_beta(alpha, beta)) / alpha)
    elif guess >= 1.0:
        guess = 1.0 - math.exp((math.log((1.0 - p) * beta) + log_beta(alpha, beta)) / beta)
    return min(max(guess, 1e-8), 1.0 - 1e-8)


def beta_inverse(p: float, alpha: float, beta: float) -> float:
    """Quantile of the Beta(alpha, beta) distribution.

    Newton-Raphson on ``I_x(alpha, beta) - p`` with the beta density as the
    derivative. A bracket around the root is narrowed on every iteration; a
    Newton step is replaced by bisection when it would leave the bracket or
    when it shrinks more slowly than halving the bracket would.
    """
    _check_shapes(alpha, beta)
    p = float(p)
    if not 0.0 <= p <= 1.0:
        raise DomainError(f"beta_inverse requires 0 <= p <= 1, got {p}")
    if p == 0.0:
        return 0.0
    if p == 1.0:
        return 1.0

    lower, upper = 0.0, 1.0
    x = _initial_beta_guess(p, alpha, beta)
    step = previous_step = upper - lower
    for _ in range(BETA_INVERSE_MAX_ITERATIONS):
        error = incomplete_beta(x, alpha, beta) - p
        if error == 0.0:
            return x
        if error > 0.0:
            upper = x
        else:
            lower = x

        density = beta_pdf(x, alpha, beta)
        newton = x - error / density if density > 0.0 and math.isfinite(density) else math.nan
        if not lower <= newton <= upper or abs(2.0 * error) > abs(previous_step * density):
            previous_step, step = step, 0.5 * (upper - lower)
            candidate = lower + step
        else:
            previous_step, step = step, abs(newton - x)
            candidate = newton

        # Converged once the chosen step is below tolerance, Newton or bisection alike.
        if step < BETA_INVERSE_TOLERANCE:
            return candidate
        x = candidate
    return x


__all__ = [
    "normal_inverse",
    "log_gamma",
    "gamma",
    "log_beta",
    "beta_function",
    "beta_pdf",
    "incomplete_beta",
    "beta_inverse",
    "BETA_INVERSE_MAX_ITERATIONS",
    "BETA_INVERSE_TOLERANCE",
]
