import logging
import numpy as np
import matplotlib.pyplot as plt
from dataclasses import dataclass, field
from typing import List, Optional, Callable, Union
import pandas as pd
from pathlib import Path
from datetime import datetime

from myusd_model.src.collaborators import (
    FixedPriceOracle,
    FixedSavingsModule,
    InMemoryBaseAsset,
    InMemoryStablecoin,
    ManualClock
)
from myusd_model.src.constants import BPS_SCALE, PRECISION
from myusd_model.src.engine import Engine
from myusd_model.src.events import Liquidated
from myusd_model.src.fixed_point import from_fixed, to_fixed
from myusd_model.src.state.protocol_config import ProtocolConfig

logger = logging.getLogger(__name__)

# Constants for rate limits, clamps between these below values
MIN_RATE = 0.01  # 1% APR
MAX_RATE = 0.30  # 30% APR

ENGINE = "engine"
RATE_CONTROLLER = "rate_controller"
LIQUIDATOR = "liquidator"

@dataclass
class ExponentialRateParams:
    base_rate: float = 0.05  #base rate (rate0 in crvusd)
    sigma: float = 0.02

@dataclass
class EMAExponentialRateParams(ExponentialRateParams):
    alpha: float = 0.01  # smoothing factor (0 to 1)

RateParams = Union[ExponentialRateParams, EMAExponentialRateParams]

@dataclass
class SimulationParams:
    initial_collateral_price: float = 2000.0
    collateral_volatility: float = 0.01   # per step
    stable_volatility: float = 0.001      # per step
    stable_reversion: float = 0.05        # pull back toward the peg per step
    simulation_days: int = 365
    steps_per_day: int = 24  # hourly steps
    n_borrowers: int = 50
    opening_ratio_range: tuple = (1.6, 3.0)
    savings_rate_bps: int = 200
    random_seed: Optional[int] = None
    experiment_name: str = "default"
    rate_params: RateParams = field(default_factory=ExponentialRateParams)

@dataclass
class RateModelConfig:
    """Configuration for a rate model including its function and parameters"""
    name: str
    model_func: Callable[..., float]
    params: RateParams

    def __str__(self):
        if isinstance(self.params, EMAExponentialRateParams):
            params_str = f"rate0={self.params.base_rate:.3f}, σ={self.params.sigma:.3f}, α={self.params.alpha:.3f}"
        else:
            params_str = f"rate0={self.params.base_rate:.3f}, σ={self.params.sigma:.3f}"
        return f"{self.name} ({params_str})"

class InterestRateModels:
    @staticmethod
    def exponential_rate(price: float, rate_params: ExponentialRateParams) -> float:
        """
        Calculate rate using exponential formula:
        rate = rate0 * exp((1 - p) / sigma)
        """
        power = (1.0 - price) / rate_params.sigma
        rate = rate_params.base_rate * np.exp(power)
        return float(np.clip(rate, MIN_RATE, MAX_RATE))

    @staticmethod
    def ema_exponential_rate(price: float, rate_params: EMAExponentialRateParams, prev_rate: Optional[float] = None) -> float:
        """
        Exponential rate smoothed with an EMA:
        rate_t = α * raw_rate + (1-α) * rate_(t-1)
        """
        raw_rate = InterestRateModels.exponential_rate(price, rate_params)

        if prev_rate is not None:
            rate = rate_params.alpha * raw_rate + (1 - rate_params.alpha) * prev_rate
        else:
            rate = raw_rate

        return float(np.clip(rate, MIN_RATE, MAX_RATE))

class LiquidationSimulation:
    """Drives the engine through a simulated market.

    Borrowers open positions at random ratios, the rate controller reprices
    once a day from the stablecoin's market price, and a single liquidator
    clears every unsafe position at each step.
    """

    def __init__(self,
                 params: SimulationParams,
                 rate_model: Callable[..., float] = InterestRateModels.exponential_rate):
        self.params = params
        self.rate_model = rate_model
        self.prev_rate: Optional[float] = None
        self.rng = np.random.default_rng(params.random_seed)

        self.clock = ManualClock(start=0)
        self.oracle = FixedPriceOracle(self._to_price(params.initial_collateral_price))
        self.stablecoin = InMemoryStablecoin(minter=ENGINE)
        self.vault = InMemoryBaseAsset()
        self.engine = Engine(
            ProtocolConfig(
                engine_address=ENGINE,
                rate_controller=RATE_CONTROLLER,
                borrow_rate=params.savings_rate_bps,
            ),
            oracle=self.oracle,
            stablecoin=self.stablecoin,
            savings=FixedSavingsModule(params.savings_rate_bps),
            vault=self.vault,
            clock=self.clock,
        )
        self.borrowers: List[str] = []
        self.liquidations: List[Liquidated] = []
        self.results: Optional[pd.DataFrame] = None

    @staticmethod
    def _to_price(price: float) -> int:
        return int(price * PRECISION)

    def calculate_rate(self, stable_price: float) -> float:
        """Calculate interest rate using the selected rate model"""
        if self.rate_model == InterestRateModels.ema_exponential_rate:
            rate = self.rate_model(stable_price, self.params.rate_params, self.prev_rate)
            self.prev_rate = rate
            return rate
        return self.rate_model(stable_price, self.params.rate_params)

    def open_positions(self) -> None:
        low, high = self.params.opening_ratio_range
        for i in range(self.params.n_borrowers):
            account = f"borrower_{i}"
            collateral = to_fixed(int(self.rng.integers(1, 11)))
            self.engine.add_collateral(account, collateral)

            ratio_pct = int(self.rng.uniform(low, high) * 100)
            value = self.engine.calculate_collateral_value(account)
            self.engine.mint_my_usd(account, value * 100 // ratio_pct)
            self.borrowers.append(account)

    def reprice(self, stable_price: float) -> int:
        floor = self.engine.savings.savings_rate()
        rate_bps = max(floor, int(self.calculate_rate(stable_price) * BPS_SCALE))
        self.engine.set_borrow_rate(RATE_CONTROLLER, rate_bps)
        return rate_bps

    def liquidate_unsafe(self) -> int:
        count = 0
        for account in self.borrowers:
            if not self.engine.is_liquidatable(account):
                continue
            debt = self.engine.get_current_debt_value(account)
            # Liquidator buys whatever MyUSD it is short of on the market
            shortfall = debt - self.stablecoin.balance_of(LIQUIDATOR)
            if shortfall > 0:
                self.stablecoin.mint_to(LIQUIDATOR, shortfall)
            self.stablecoin.approve(LIQUIDATOR, ENGINE, debt)
            self.liquidations.append(self.engine.liquidate(LIQUIDATOR, account))
            count += 1
        return count

    def simulate(self) -> pd.DataFrame:
        self.open_positions()

        collateral_price = self.params.initial_collateral_price
        stable_price = 1.0
        seconds_per_step = 24 * 60 * 60 // self.params.steps_per_day
        total_steps = self.params.simulation_days * self.params.steps_per_day
        rate_bps = self.engine.borrow_rate
        rows = []

        for step in range(total_steps):
            self.clock.advance(seconds_per_step)

            # Collateral follows a geometric random walk, MyUSD mean-reverts to the peg
            collateral_price *= (1 + self.rng.normal(0, self.params.collateral_volatility))
            stable_price += (self.params.stable_reversion * (1.0 - stable_price)
                             + self.rng.normal(0, self.params.stable_volatility))
            self.oracle.set_price(self._to_price(collateral_price))

            if step % self.params.steps_per_day == 0:
                rate_bps = self.reprice(stable_price)

            liquidated = self.liquidate_unsafe()

            rows.append({
                "time": step / self.params.steps_per_day,
                "collateral_price": collateral_price,
                "stable_price": stable_price,
                "borrow_rate_bps": rate_bps,
                "exchange_rate": from_fixed(self.engine.current_exchange_rate()),
                "total_debt": from_fixed(self.engine.total_debt_value()),
                "open_positions": sum(1 for a in self.borrowers if self.engine.debt_shares_of(a) > 0),
                "liquidations": liquidated,
            })

        self.results = pd.DataFrame(rows)
        self.results["cumulative_liquidations"] = self.results["liquidations"].cumsum()
        logger.info(
            "Simulation finished",
            extra={
                "event": "simulation.finished",
                "experiment": self.params.experiment_name,
                "liquidations": len(self.liquidations),
            }
        )
        return self.results

    def plot_results(self):
        if self.results is None:
            raise RuntimeError("simulate() must run before plot_results()")
        output_dir = Path('research/results') / self.params.experiment_name
        output_dir.mkdir(parents=True, exist_ok=True)

        df = self.results
        fig, (ax1, ax2, ax3) = plt.subplots(3, 1, figsize=(12, 10), sharex=True)

        ax1.plot(df["time"], df["collateral_price"], label='Collateral Price')
        ax1.set_ylabel('Price (MyUSD)')
        ax1.set_title('Collateral Price Over Time')
        ax1.legend()
        ax1.grid(True)

        ax2.plot(df["time"], df["borrow_rate_bps"] / 100, label='Borrow Rate', color='orange')
        ax2.set_ylabel('Borrow Rate (%)')
        ax2.set_title('Borrow Rate Over Time')
        ax2.legend()
        ax2.grid(True)

        ax3.plot(df["time"], df["cumulative_liquidations"], label='Liquidations', color='red')
        ax3.set_ylabel('Positions')
        ax3.set_xlabel('Time (days)')
        ax3.set_title('Cumulative Liquidations')
        ax3.legend()
        ax3.grid(True)

        plt.tight_layout()

        plot_name = f"sigma_{self.params.rate_params.sigma}_base_rate_{self.params.rate_params.base_rate}"
        if self.params.random_seed is not None:
            plot_name += f"_seed_{self.params.random_seed}"

        plt.savefig(output_dir / f"{plot_name}.png")
        df.to_csv(output_dir / f"{plot_name}.csv", index=False)
        plt.close()

def compare_rate_models(rate_models: List[RateModelConfig], base_params: SimulationParams) -> pd.DataFrame:
    """Run the same market under each rate model and plot them together"""
    output_dir = Path('research/results/rate_model_comparison')
    output_dir.mkdir(parents=True, exist_ok=True)

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(12, 10))
    summary = []

    for model_config in rate_models:
        params = SimulationParams(
            initial_collateral_price=base_params.initial_collateral_price,
            collateral_volatility=base_params.collateral_volatility,
            stable_volatility=base_params.stable_volatility,
            stable_reversion=base_params.stable_reversion,
            simulation_days=base_params.simulation_days,
            steps_per_day=base_params.steps_per_day,
            n_borrowers=base_params.n_borrowers,
            opening_ratio_range=base_params.opening_ratio_range,
            savings_rate_bps=base_params.savings_rate_bps,
            random_seed=base_params.random_seed,
            experiment_name=base_params.experiment_name,
            rate_params=model_config.params
        )

        sim = LiquidationSimulation(params, rate_model=model_config.model_func)
        df = sim.simulate()

        ax1.plot(df["time"], df["borrow_rate_bps"] / 100, label=str(model_config))
        ax2.plot(df["time"], df["cumulative_liquidations"], label=str(model_config))
        summary.append({
            "model": str(model_config),
            "liquidations": len(sim.liquidations),
            "final_exchange_rate": df["exchange_rate"].iloc[-1],
            "final_total_debt": df["total_debt"].iloc[-1],
        })

    ax1.set_ylabel('Borrow Rate (%)')
    ax1.set_title('Borrow Rate Over Time')
    ax1.legend(bbox_to_anchor=(1.05, 1), loc='upper left')
    ax1.grid(True, alpha=0.3)  # Lighter grid

    ax2.set_ylabel('Positions')
    ax2.set_xlabel('Time (days)')
    ax2.set_title('Cumulative Liquidations')
    ax2.legend(bbox_to_anchor=(1.05, 1), loc='upper left')
    ax2.grid(True, alpha=0.3)

    seed_text = f"Random Seed: {base_params.random_seed}" if base_params.random_seed is not None else "No Seed"
    fig.text(0.02, 0.02, seed_text, fontsize=8, alpha=0.7)

    plt.tight_layout()

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    plt.savefig(output_dir / f"rate_comparison_{timestamp}.png", bbox_inches='tight', dpi=300)
    plt.close()

    return pd.DataFrame(summary)

def main():
    logging.basicConfig(level=logging.INFO)

    rate_models = [
        RateModelConfig(
            name="Exponential 1",
            model_func=InterestRateModels.exponential_rate,
            params=ExponentialRateParams(base_rate=0.05, sigma=0.005)),
        RateModelConfig(
            name="Exponential 2",
            model_func=InterestRateModels.exponential_rate,
            params=ExponentialRateParams(base_rate=0.05, sigma=0.02)),
        RateModelConfig(
            name="EMA Exponential",
            model_func=InterestRateModels.ema_exponential_rate,
            params=EMAExponentialRateParams(base_rate=0.05, sigma=0.01, alpha=0.03)
        ),
    ]

    base_params = SimulationParams(
        experiment_name="rate_model_comparison",
        random_seed=57,
        simulation_days=100
    )

    summary = compare_rate_models(rate_models, base_params)
    print(summary.to_string(index=False))

if __name__ == "__main__":
    main()
