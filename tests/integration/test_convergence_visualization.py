"""Integration tests with visualizations of convergence behaviour.

These tests run the integrators end to end on problems with known answers
and plot where the work goes: adaptive leaves crowding around a spike,
Romberg diagonals approaching the exact value, and the step sizes chosen by
the Dormand-Prince controller.

Run:
    pytest tests/integration/test_convergence_visualization.py -v

Output:
    test_output/test_convergence_visualization/<test_name>/
"""

from __future__ import annotations

import math

import numpy as np

import adaptnum


def spike(x: float) -> float:
    return math.exp(-(((x - 0.25) / 0.01) ** 2))


class TestAdaptiveQuadratureVisualization:
    """Visual tests for adaptive subdivision."""

    def test_leaf_widths_around_spike(self, test_output_dir):
        """
        Plot leaf widths over the interval.

        Leaves shrink near the spike and stay wide where the integrand is
        flat; the total matches sqrt(pi) * 0.01.
        """
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        result = adaptnum.adaptive_integrate(spike, 0, 1, tol=1e-10, max_depth=40)
        leaves = result.details["leaves"]
        centres = np.array([(leaf.a + leaf.b) / 2 for leaf in leaves])
        widths = np.array([leaf.b - leaf.a for leaf in leaves])

        fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(10, 7), sharex=True)
        xs = np.linspace(0, 1, 2000)
        ax1.plot(xs, [spike(x) for x in xs], color="steelblue")
        ax1.set_ylabel("f(x)")
        ax1.set_title(f"adaptive Simpson: {len(leaves)} leaves, {result.n_function_calls} calls")
        ax2.semilogy(centres, widths, "o", markersize=3, color="darkorange")
        ax2.set_xlabel("x")
        ax2.set_ylabel("leaf width")
        fig.tight_layout()
        path = test_output_dir / "leaf_widths.png"
        fig.savefig(path, dpi=100)
        plt.close(fig)

        assert path.exists()
        assert result.converged
        assert abs(result.value - math.sqrt(math.pi) * 0.01) < 1e-10
        near = widths[np.abs(centres - 0.25) < 0.02].min()
        assert near < widths.max() / 100

    def test_calls_versus_tolerance(self, test_output_dir):
        """Evaluation count grows as the tolerance tightens, for both rules."""
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        tolerances = [10.0**-k for k in range(3, 11)]
        calls = {
            rule: [adaptnum.adaptive_integrate(math.exp, 0, 2, tol=tol, rule=rule).n_function_calls for tol in tolerances]
            for rule in ("trapezoid", "simpson")
        }

        fig, ax = plt.subplots(figsize=(8, 5))
        for rule, counts in calls.items():
            ax.loglog(tolerances, counts, "o-", label=rule)
        ax.invert_xaxis()
        ax.set_xlabel("tol")
        ax.set_ylabel("function calls")
        ax.legend()
        path = test_output_dir / "calls_vs_tol.png"
        fig.savefig(path, dpi=100)
        plt.close(fig)

        assert path.exists()
        for counts in calls.values():
            assert all(b >= a for a, b in zip(counts, counts[1:]))
        assert calls["simpson"][-1] < calls["trapezoid"][-1]


class TestRombergVisualization:
    def test_diagonal_convergence(self, test_output_dir):
        """Error of every Romberg column versus level, saved with the table."""
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        table = adaptnum.romberg_table(math.sin, 0, math.pi, max_levels=7)
        df = table.to_dataframe()
        df.to_csv(test_output_dir / "romberg_table.csv")

        fig, ax = plt.subplots(figsize=(8, 5))
        for column in df.columns:
            errors = (df[column] - 2.0).abs().dropna()
            ax.semilogy(errors.index, errors.clip(lower=1e-17), "o-", label=column)
        ax.set_xscale("log", base=2)
        ax.set_xlabel("panels")
        ax.set_ylabel("|R - 2|")
        ax.legend(ncol=2)
        path = test_output_dir / "romberg_errors.png"
        fig.savefig(path, dpi=100)
        plt.close(fig)

        assert path.exists()
        diagonal_errors = np.abs(table.diagonal - 2.0)
        assert diagonal_errors[-1] < 1e-12
        assert diagonal_errors[-1] < diagonal_errors[0]


class TestDormandPrinceVisualization:
    def test_step_sizes_on_van_der_pol(self, test_output_dir):
        """
        Step sizes shrink during the fast relaxation phases of a
        Van der Pol oscillator and grow on the slow branches.
        """
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        mu = 5.0

        def van_der_pol(t, y):
            return np.array([y[1], mu * (1 - y[0] ** 2) * y[1] - y[0]])

        sol = adaptnum.dopri_solve(van_der_pol, (0.0, 30.0), [2.0, 0.0], rtol=1e-6, atol=1e-9)
        t, y = sol.as_arrays()
        steps = np.diff(t)

        fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(10, 7), sharex=True)
        ax1.plot(t, y[:, 0], color="steelblue")
        ax1.set_ylabel("x(t)")
        ax1.set_title(
            f"DOPRI5: {sol.n_accepted} accepted, {sol.n_rejected} rejected, "
            f"{sol.n_function_calls} calls"
        )
        ax2.semilogy(t[1:], steps, ".", color="darkorange")
        ax2.set_xlabel("t")
        ax2.set_ylabel("step size")
        fig.tight_layout()
        path = test_output_dir / "van_der_pol_steps.png"
        fig.savefig(path, dpi=100)
        plt.close(fig)
        sol.to_dataframe().to_csv(test_output_dir / "van_der_pol.csv", index=False)

        assert path.exists()
        assert sol.converged
        assert sol.t_final == 30.0
        assert steps.max() / steps.min() > 10

    def test_fixed_step_versus_adaptive(self, test_output_dir):
        """RK4 on a fine grid and DOPRI5 agree on the harmonic oscillator."""
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        def oscillator(t, y):
            return np.array([y[1], -y[0]])

        fixed = adaptnum.runge_kutta_solve(oscillator, (0.0, 10.0), [1.0, 0.0], step_size=0.01)
        adaptive = adaptnum.dopri_solve(oscillator, (0.0, 10.0), [1.0, 0.0], rtol=1e-9, atol=1e-12)

        fig, ax = plt.subplots(figsize=(8, 5))
        t_fixed, y_fixed = fixed.as_arrays()
        t_adaptive, y_adaptive = adaptive.as_arrays()
        ax.plot(t_fixed, y_fixed[:, 0], label="rk4, h=0.01")
        ax.plot(t_adaptive, y_adaptive[:, 0], "o", markersize=3, label="dopri5")
        ax.legend()
        path = test_output_dir / "oscillator.png"
        fig.savefig(path, dpi=100)
        plt.close(fig)

        assert path.exists()
        exact = np.array([math.cos(10.0), -math.sin(10.0)])
        np.testing.assert_allclose(fixed.y_final, exact, atol=1e-8)
        np.testing.assert_allclose(adaptive.y_final, exact, atol=1e-7)
        assert len(adaptive) < len(fixed)
