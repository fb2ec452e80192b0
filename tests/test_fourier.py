import dataclasses

import numpy as np
import pytest

from ews.base.exceptions import ModeCountError, ShapeMismatchError
from ews.modal.fourier import (
    BoundaryBasis, BoundaryData, boundary_energy, default_basis_order,
    fields_to_fourier_modes, fourier_modes_to_fields, mode_range,
    normalize, validate_modes
)


@pytest.fixture
def quarter_turn():
    thetas = np.array([0, np.pi / 2, np.pi, 3 * np.pi / 2])
    fields = np.array([1, 1j, -1, -1j])
    return thetas, fields


class TestFieldsToModes:
    def test_single_harmonic(self, quarter_turn):
        thetas, fields = quarter_turn
        coes = fields_to_fourier_modes(thetas, fields, [-1, 0, 1, 2])
        np.testing.assert_allclose(coes, [0, 0, 1, 0], atol=1e-12)

    def test_exact_when_modes_equal_samples(self):
        rng = np.random.default_rng(1)
        thetas = np.sort(rng.uniform(0, 2 * np.pi, 7))
        fields = rng.normal(size=(7, 2)) + 1j * rng.normal(size=(7, 2))

        coes = fields_to_fourier_modes(thetas, fields, 3)
        assert coes.shape == (7, 2)
        np.testing.assert_allclose(fourier_modes_to_fields(thetas, coes, 3), fields, atol=1e-9)

    def test_band_limited_field_is_recovered(self):
        thetas = np.linspace(0, 2 * np.pi, 40, endpoint=False)
        fields = 2.0 * np.exp(-2j * thetas) + (0.5 - 1j) * np.exp(3j * thetas)

        coes = fields_to_fourier_modes(thetas, fields, 4)
        expected = np.zeros(9, dtype=complex)
        expected[-2 + 4] = 2.0
        expected[3 + 4] = 0.5 - 1j
        np.testing.assert_allclose(coes, expected, atol=1e-12)

    def test_residual_is_orthogonal_to_basis(self):
        rng = np.random.default_rng(2)
        thetas = np.sort(rng.uniform(0, 2 * np.pi, 30))
        fields = rng.normal(size=30) + 1j * rng.normal(size=30)
        modes = mode_range(5)

        coes = fields_to_fourier_modes(thetas, fields, modes)
        residual = fields - fourier_modes_to_fields(thetas, coes, modes)
        exps = np.exp(1j * np.outer(thetas, modes))
        np.testing.assert_allclose(exps.conj().T @ residual, 0, atol=1e-10)

    def test_default_modes(self):
        thetas = np.linspace(0, 2 * np.pi, 8, endpoint=False)
        coes = fields_to_fourier_modes(thetas, np.cos(thetas))
        assert coes.shape == (7,)
        np.testing.assert_allclose(coes[[2, 4]], [0.5, 0.5], atol=1e-12)

    def test_too_many_modes(self, quarter_turn):
        thetas, fields = quarter_turn
        with pytest.raises(ModeCountError):
            fields_to_fourier_modes(thetas, fields, [-2, -1, 0, 1, 2])

    def test_too_many_modes_is_value_error(self, quarter_turn):
        thetas, fields = quarter_turn
        with pytest.raises(ValueError):
            fields_to_fourier_modes(thetas, fields, 3)

    def test_fields_must_match_angles(self, quarter_turn):
        thetas, fields = quarter_turn
        with pytest.raises(ShapeMismatchError):
            fields_to_fourier_modes(thetas, fields[:3], [0, 1])


class TestModesToFields:
    def test_evaluates_at_new_angles(self):
        thetas = np.array([0.3, 1.1, 2.5])
        fields = fourier_modes_to_fields(thetas, [0, 0, 1], [-1, 0, 1])
        np.testing.assert_allclose(fields, np.exp(1j * thetas))

    def test_symmetric_modes_are_inferred(self):
        thetas = np.array([0.0, 1.0])
        fields = fourier_modes_to_fields(thetas, [1, 0, 0])
        np.testing.assert_allclose(fields, np.exp(-1j * thetas))

    def test_even_coefficient_count_without_modes(self):
        with pytest.raises(ShapeMismatchError):
            fourier_modes_to_fields([0.0, 1.0], [1, 2])

    def test_coefficients_must_match_modes(self):
        with pytest.raises(ShapeMismatchError):
            fourier_modes_to_fields([0.0, 1.0], [1, 2, 3], [0, 1])


class TestModeHelpers:
    @pytest.mark.parametrize("num_samples, order", [(1, 0), (2, 0), (3, 1), (8, 3), (9, 4)])
    def test_default_basis_order(self, num_samples, order):
        assert default_basis_order(num_samples) == order
        assert len(mode_range(order)) <= num_samples

    def test_negative_order(self):
        with pytest.raises(ValueError):
            mode_range(-1)

    @pytest.mark.parametrize("modes", [[0, 0, 1], [1, 0], [0.5, 1.0]])
    def test_invalid_modes(self, modes):
        with pytest.raises(ValueError):
            validate_modes(modes)


class TestBoundaryData:
    def test_with_fourier_modes_returns_new_record(self, quarter_turn):
        thetas, fields = quarter_turn
        bd = BoundaryData(thetas, fields)
        fitted = bd.with_fourier_modes([-1, 0, 1, 2])

        assert fitted is not bd
        assert not bd.has_coefficients
        assert fitted.has_coefficients
        np.testing.assert_array_equal(fitted.modes, [-1, 0, 1, 2])
        np.testing.assert_allclose(fitted.coefficients, [0, 0, 1, 0], atol=1e-12)

    def test_arrays_are_owned(self, quarter_turn):
        thetas, fields = quarter_turn
        fields = fields.astype(complex)
        bd = BoundaryData(thetas, fields)
        fields[0] = 100

        assert bd.fields[0] == 1
        assert not np.shares_memory(bd.thetas, thetas)

    def test_records_are_frozen(self, quarter_turn):
        bd = BoundaryData(*quarter_turn)
        with pytest.raises(dataclasses.FrozenInstanceError):
            bd.fields = np.zeros(4)

    def test_fields_from_modes(self):
        bd = BoundaryData(np.array([0.0, 1.0, 2.0]), modes=[0, 1], coefficients=[1, 1])
        new_thetas = np.array([0.5, 1.5])
        rebuilt = bd.with_fields_from_modes(new_thetas)

        np.testing.assert_allclose(rebuilt.thetas, new_thetas)
        np.testing.assert_allclose(rebuilt.fields, 1 + np.exp(1j * new_thetas))
        assert not bd.has_fields

    def test_fields_must_match_angles(self):
        with pytest.raises(ShapeMismatchError):
            BoundaryData(np.zeros(3), fields=np.zeros(4))

    def test_coefficients_must_match_modes(self):
        with pytest.raises(ShapeMismatchError):
            BoundaryData(np.zeros(3), modes=[0, 1], coefficients=[1, 2, 3])

    def test_more_modes_than_angles(self):
        with pytest.raises(ModeCountError):
            BoundaryData(np.zeros(2), modes=[-1, 0, 1], coefficients=[1, 2, 3])


class TestNormalize:
    def test_sampled_fields_have_unit_energy(self):
        thetas = np.linspace(0, 2 * np.pi, 60, endpoint=False)
        basis = BoundaryBasis([
            BoundaryData(thetas, 3 * np.cos(thetas) + 1j),
            BoundaryData(thetas, np.column_stack([np.sin(thetas), 2 * np.cos(2 * thetas)])),
        ])
        normalize(basis)

        for bd in basis:
            assert boundary_energy(bd) == pytest.approx(1.0)

    def test_coefficients_only_have_unit_energy(self):
        bd = BoundaryData(np.zeros(5), modes=[-1, 0, 1], coefficients=[1, 2j, -3])
        normalize(BoundaryBasis([bd]))

        assert 2 * np.pi * np.linalg.norm(bd.coefficients)**2 == pytest.approx(1.0)

    def test_idempotent(self):
        thetas = np.linspace(0, 2 * np.pi, 20, endpoint=False)
        basis = BoundaryBasis([BoundaryData(thetas, 5 * np.exp(2j * thetas))])

        basis.normalize()
        once = basis[0].fields.copy()
        basis.normalize()
        np.testing.assert_allclose(basis[0].fields, once)

    def test_fields_and_coefficients_share_a_scale(self):
        thetas = np.linspace(0, 2 * np.pi, 30, endpoint=False)
        bd = BoundaryData(thetas, 4 * np.exp(1j * thetas)).with_fourier_modes(2)
        normalize(BoundaryBasis([bd]))

        np.testing.assert_allclose(
            fourier_modes_to_fields(bd.thetas, bd.coefficients, bd.modes), bd.fields, atol=1e-12
        )

    def test_returns_the_same_basis(self):
        basis = BoundaryBasis([BoundaryData(np.zeros(3), np.ones(3))])
        assert normalize(basis) is basis

    def test_empty_record_is_unchanged(self):
        bd = BoundaryData(np.linspace(0, 1, 4))
        normalize(BoundaryBasis([bd]))

        assert not bd.has_fields and not bd.has_coefficients

    def test_zero_record_is_unchanged(self):
        bd = BoundaryData(np.linspace(0, 1, 4), np.zeros(4))
        normalize(BoundaryBasis([bd]))

        np.testing.assert_array_equal(bd.fields, 0)

    def test_field_energy_agrees_with_parseval(self):
        thetas = np.linspace(0, 2 * np.pi, 2000, endpoint=False)
        fields = np.exp(1j * thetas) + 0.5 * np.exp(-2j * thetas)
        sampled = BoundaryData(thetas, fields)
        modal = BoundaryData(thetas, modes=mode_range(2), coefficients=[0.5, 0, 0, 1, 0])

        assert boundary_energy(sampled) == pytest.approx(boundary_energy(modal), rel=1e-2)
