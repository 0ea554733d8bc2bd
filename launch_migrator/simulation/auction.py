#!/usr/bin/env python3
"""
Simulated Auction

Auction and auction factory stand-ins. Price discovery is not modelled:
a scenario records the clearing result directly, which deposits the
raised currency with the auction as if bids had been filled.
"""

import logging
from typing import Dict, Optional

from eth_abi import decode
from eth_utils import keccak, to_checksum_address

from ..core.addresses import compute_create2_address, derive_salt, normalize_address
from ..core.exceptions import InsufficientBalance, SimulationError
from ..engine.interfaces import AuctionFactoryInterface, AuctionInterface
from ..engine.orchestrator import AUCTION_PARAMETERS_ABI

logger = logging.getLogger(__name__)

AUCTION_INIT_CODE = b"launch_migrator.SimulatedAuction"


class SimulatedAuction(AuctionInterface):
    """Holds the auctioned tokens and the raised currency"""

    def __init__(self, chain, address: str, token: str, amount: int,
                 currency: str, funds_recipient: str, end_block: int):
        self.chain = chain
        self.address = normalize_address(address)
        self.token = normalize_address(token)
        self.total_supply = amount
        self.currency = normalize_address(currency)
        self.funds_recipient = normalize_address(funds_recipient)
        self.end_block = end_block

        self.tokens_received = False
        self._clearing_price = 0
        self._currency_raised = 0
        self.currency_swept = False

    def snapshot(self) -> dict:
        return {
            "tokens_received": self.tokens_received,
            "clearing_price": self._clearing_price,
            "currency_raised": self._currency_raised,
            "currency_swept": self.currency_swept
        }

    def restore(self, snapshot: dict):
        self.tokens_received = snapshot["tokens_received"]
        self._clearing_price = snapshot["clearing_price"]
        self._currency_raised = snapshot["currency_raised"]
        self.currency_swept = snapshot["currency_swept"]

    def on_tokens_received(self):
        balance = self.chain.balance_of(self.token, self.address)
        if balance < self.total_supply:
            raise InsufficientBalance(self.token, self.address, balance, self.total_supply)
        self.tokens_received = True

    def record_clearing(self, clearing_price: int, currency_raised: int):
        """Record the auction outcome and deposit the raised currency"""
        if not self.tokens_received:
            raise SimulationError("Auction has not received its tokens")
        if self.chain.block_number > self.end_block:
            raise SimulationError(f"Auction ended at block {self.end_block}")

        with self.chain.atomic():
            self.chain.mint(self.currency, self.address, currency_raised)
            self._clearing_price = clearing_price
            self._currency_raised += currency_raised

        logger.debug("Auction %s cleared at %d raising %d", self.address, clearing_price, currency_raised)

    def clearing_price(self) -> int:
        return self._clearing_price

    def currency_raised(self) -> int:
        return self._currency_raised

    def sweep_currency(self) -> int:
        """After the end block, hand the raised currency to the funds recipient"""
        if self.chain.block_number <= self.end_block:
            raise SimulationError(f"Auction still live until block {self.end_block}")
        if self.currency_swept:
            return 0

        with self.chain.atomic():
            amount = self.chain.balance_of(self.currency, self.address)
            self.chain.transfer(self.currency, self.address, self.funds_recipient, amount)
            self.currency_swept = True
        return amount


class SimulatedAuctionFactory(AuctionFactoryInterface):
    """Deploys auctions at CREATE2 addresses derived from the sender-bound salt"""

    def __init__(self, chain, address: str):
        self.chain = chain
        self.address = normalize_address(address)
        self.auctions: Dict[str, SimulatedAuction] = {}
        chain.register(self.address, self)

    def snapshot(self) -> Dict[str, SimulatedAuction]:
        return dict(self.auctions)

    def restore(self, snapshot: Dict[str, SimulatedAuction]):
        self.auctions = snapshot

    def get_auction_address(self, sender: str, token: str, amount: int,
                            config_data: bytes, salt: bytes) -> str:
        init_code_hash = keccak(
            AUCTION_INIT_CODE + bytes.fromhex(normalize_address(token)[2:]) +
            amount.to_bytes(32, "big") + config_data
        )
        return compute_create2_address(self.address, derive_salt(sender, salt), init_code_hash)

    def initialize_distribution(self, sender: str, token: str, amount: int,
                                config_data: bytes, salt: bytes) -> SimulatedAuction:
        currency, funds_recipient, end_block = decode(AUCTION_PARAMETERS_ABI, config_data)
        address = self.get_auction_address(sender, token, amount, config_data, salt)

        auction = SimulatedAuction(
            self.chain,
            address,
            token,
            amount,
            to_checksum_address(currency),
            to_checksum_address(funds_recipient),
            end_block
        )
        self.chain.register(address, auction)
        self.auctions[address] = auction
        logger.debug("Deployed auction %s for %d tokens", address, amount)
        return auction

    def find(self, address: str) -> Optional[SimulatedAuction]:
        return self.auctions.get(normalize_address(address))
