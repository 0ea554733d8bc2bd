#!/usr/bin/env python3
"""
Configuration Tests

Schema validation, bundled configuration files and strategy selection.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from launch_migrator.engine.config import (
    MigrationConfig, StrategyKind, build_strategy, load_config, save_config
)
from launch_migrator.simulation.chain import SimulatedChain
from launch_migrator.simulation.virtual_token import SimulatedVirtualToken
from launch_migrator.strategies import (
    AdvancedStrategy, FullRangeStrategy, GovernedStrategy, VirtualTokenStrategy
)

from .helpers import CURRENCY, GOVERNANCE, TOKEN, make_config

CONFIG_DIR = Path(__file__).resolve().parents[2] / "configs"


class TestMigrationConfig:

    def test_supply_split(self):
        """Auction share and reserve add up to the total supply"""
        config = make_config(total_supply=1001, token_split_to_auction_bps=3333)
        assert config.auction_supply == 1001 * 3333 // 10_000
        assert config.auction_supply + config.reserve_supply == 1001

    def test_defaults(self):
        """Optional fields take their defaults"""
        config = make_config()
        assert config.strategy == StrategyKind.FULL_RANGE
        assert config.max_currency_amount_for_lp == 2 ** 128 - 1
        assert config.auction_salt == 0
        assert config.auction_parameters.currency is None

    def test_addresses_checksummed(self):
        """Addresses are stored in checksum form"""
        config = make_config(operator="0x52908400098527886e0f7030069857d2e4169ee7")
        assert config.operator == "0x52908400098527886E0F7030069857D2E4169EE7"

    def test_malformed_address_rejected(self):
        """Malformed addresses fail validation"""
        with pytest.raises(ValidationError):
            make_config(token="0x1234")

    def test_type_bounds(self):
        """Integer fields are bounded by their widths"""
        with pytest.raises(ValidationError):
            make_config(total_supply=2 ** 128)
        with pytest.raises(ValidationError):
            make_config(fee=2 ** 24)
        with pytest.raises(ValidationError):
            make_config(migration_block=-1)

    def test_governed_requires_governance(self):
        """The governed strategy needs a governance address"""
        with pytest.raises(ValidationError):
            make_config(strategy="governed")
        assert make_config(strategy="governed", governance=GOVERNANCE).governance == GOVERNANCE

    def test_frozen(self):
        """Configs cannot be modified"""
        config = make_config()
        with pytest.raises(ValidationError):
            config.fee = 500

    def test_save_and_load(self, tmp_path):
        """A saved config loads back identical"""
        config = make_config(strategy="advanced", create_one_sided_token_position=True)
        path = save_config(config, tmp_path / "migration.json")
        assert load_config(path) == config

        print(f"✅ Configuration saved and reloaded from {path.name}")


class TestBundledConfigs:
    """Configuration files shipped with the project stay loadable"""

    @pytest.mark.parametrize("name, strategy", [
        ("basic_migration.json", StrategyKind.FULL_RANGE),
        ("advanced_migration.json", StrategyKind.ADVANCED),
        ("governed_migration.json", StrategyKind.GOVERNED),
    ])
    def test_load(self, name, strategy):
        """Bundled configs load with their strategy"""
        config = load_config(CONFIG_DIR / name)
        assert config.strategy == strategy
        assert config.sweep_block > config.migration_block
        assert config.auction_parameters.end_block < config.migration_block


class TestBuildStrategy:

    def test_variants(self):
        """Each strategy kind builds its class"""
        assert isinstance(build_strategy(make_config()), FullRangeStrategy)

        advanced = build_strategy(make_config(strategy="advanced", create_one_sided_currency_position=True))
        assert isinstance(advanced, AdvancedStrategy)
        assert not advanced.create_one_sided_token_position
        assert advanced.create_one_sided_currency_position

        governed = build_strategy(make_config(strategy="governed", governance=GOVERNANCE))
        assert isinstance(governed, GovernedStrategy)
        assert governed.governance == GOVERNANCE

    def test_virtual_requires_token_contract(self):
        """The virtual strategy needs the token contract"""
        with pytest.raises(ValueError):
            build_strategy(make_config(strategy="virtual"))

    def test_virtual_inner_strategy(self):
        """The virtual strategy wraps the configured inner strategy"""
        virtual_token = SimulatedVirtualToken(SimulatedChain(), TOKEN, CURRENCY)

        plain = build_strategy(make_config(strategy="virtual"), virtual_token)
        assert isinstance(plain, VirtualTokenStrategy)
        assert isinstance(plain.inner, FullRangeStrategy)

        extended = build_strategy(
            make_config(strategy="virtual", create_one_sided_token_position=True), virtual_token
        )
        assert isinstance(extended.inner, AdvancedStrategy)

        print("✅ Strategy variants built from configuration")
