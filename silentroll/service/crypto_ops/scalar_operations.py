from typing import Dict, List, Sequence

# ============================================================================
# Scalar Operations (Encrypted Game Arithmetic)
# ============================================================================

def centered(value: int, plain_modulus: int) -> int:
    """Map a residue to the centered range OpenFHE expects for encoding."""
    value %= plain_modulus
    return value - plain_modulus if value > plain_modulus // 2 else value


def encode_scalar(cc, value: int, plain_modulus: int):
    """
    Encode an integer into the constant coefficient of a plaintext.

    Constant polynomials multiply like scalars, so every homomorphic
    operation below works on slot 0 without batching.
    """
    return cc.MakeCoefPackedPlaintext([centered(value, plain_modulus)])


def encrypt_scalar(cc, public_key, value: int, plain_modulus: int):
    """
    Encrypt a single integer under the joint public key.

    Zero is encrypted exactly like any other value, so a freshly enrolled
    record is indistinguishable from one with a score.
    """
    return cc.Encrypt(public_key, encode_scalar(cc, value, plain_modulus))


def add_encrypted(cc, left, right):
    """Homomorphic addition (wraps modulo the plaintext modulus)."""
    return cc.EvalAdd(left, right)


def add_constant(cc, ciphertext, value: int, plain_modulus: int):
    return cc.EvalAdd(ciphertext, encode_scalar(cc, value, plain_modulus))


def multiply_constant(cc, ciphertext, value: int, plain_modulus: int):
    return cc.EvalMult(ciphertext, encode_scalar(cc, value, plain_modulus))


def multiply_encrypted(cc, left, right):
    """Homomorphic multiplication (needs the joint eval mult key)."""
    return cc.EvalMult(left, right)


# ============================================================================
# Comparison via Indicator Polynomials
# ============================================================================

def lagrange_coefficients(points: Sequence[tuple], plain_modulus: int) -> List[int]:
    """
    Interpolate the polynomial through (x, y) points over GF(plain_modulus).

    Args:
        points: Distinct (x, y) pairs
        plain_modulus: Prime plaintext modulus

    Returns:
        Coefficients from the constant term upwards
        Example: [(0, 1), (1, 0)] -> [1, p - 1]  (1 - x)
    """
    coefficients = [0] * len(points)

    for i, (xi, yi) in enumerate(points):
        if yi % plain_modulus == 0:
            continue

        basis = [1]
        denominator = 1
        for j, (xj, _) in enumerate(points):
            if j == i:
                continue
            # basis *= (x - xj)
            expanded = [0] * (len(basis) + 1)
            for k, c in enumerate(basis):
                expanded[k] = (expanded[k] - c * xj) % plain_modulus
                expanded[k + 1] = (expanded[k + 1] + c) % plain_modulus
            basis = expanded
            denominator = denominator * (xi - xj) % plain_modulus

        scale = yi * pow(denominator, -1, plain_modulus) % plain_modulus
        for k, c in enumerate(basis):
            coefficients[k] = (coefficients[k] + c * scale) % plain_modulus

    return coefficients


def encrypted_powers(cc, ciphertext, degree: int) -> Dict[int, object]:
    """
    Compute x^1 .. x^degree with depth ceil(log2(degree)).

    Each power is built from the largest power of two below it, so x^k never
    sits deeper than the power of two that covers k.
    """
    powers = {1: ciphertext}
    for k in range(2, degree + 1):
        high = 1 << (k.bit_length() - 1)
        if high == k:
            half = powers[k // 2]
            powers[k] = multiply_encrypted(cc, half, half)
        else:
            powers[k] = multiply_encrypted(cc, powers[high], powers[k - high])
    return powers


def evaluate_polynomial(cc, ciphertext, coefficients: List[int], plain_modulus: int):
    """Evaluate sum(c_k * x^k) homomorphically."""
    degree = max((k for k, c in enumerate(coefficients) if c), default=0)
    if degree == 0:
        raise ValueError("Polynomial must depend on the encrypted input")

    powers = encrypted_powers(cc, ciphertext, degree)

    result = None
    for k in range(1, degree + 1):
        if not coefficients[k]:
            continue
        term = multiply_constant(cc, powers[k], coefficients[k], plain_modulus)
        result = term if result is None else cc.EvalAdd(result, term)

    if coefficients[0]:
        result = add_constant(cc, result, coefficients[0], plain_modulus)
    return result


def is_at_least(cc, ciphertext, threshold: int, domain: Sequence[int], plain_modulus: int):
    """
    Encrypted boolean (0/1) for x >= threshold, valid for every x in domain.

    The indicator is exact on the domain; inputs outside it are undefined,
    so callers pass the full range the encrypted value can take.
    """
    points = [(x, 1 if x >= threshold else 0) for x in domain]
    if all(y == 1 for _, y in points) or all(y == 0 for _, y in points):
        raise ValueError(f"Threshold {threshold} does not split domain {list(domain)}")

    coefficients = lagrange_coefficients(points, plain_modulus)
    return evaluate_polynomial(cc, ciphertext, coefficients, plain_modulus)


def boolean_equal(cc, left, right, plain_modulus: int):
    """
    Equality of two encrypted booleans: 1 - a - b + 2ab.

    No branch reveals which side was true.
    """
    product = multiply_encrypted(cc, left, right)
    doubled = cc.EvalAdd(product, product)
    result = cc.EvalSub(doubled, cc.EvalAdd(left, right))
    return add_constant(cc, result, 1, plain_modulus)


def select_constant(cc, condition, when_true: int, when_false: int, plain_modulus: int):
    """
    Homomorphic select between two cleartext constants: c * (a - b) + b.
    """
    scaled = multiply_constant(cc, condition, when_true - when_false, plain_modulus)
    return add_constant(cc, scaled, when_false, plain_modulus)
