#!/usr/bin/env python3
"""
Migration Exceptions

Failure taxonomy for the auction-to-pool migration. Every exception aborts
the enclosing operation with no state change.
"""


class LaunchMigratorError(Exception):
    """Base exception for the launch migrator"""
    pass


# Construction time
class ConfigurationError(LaunchMigratorError):
    """Migration configuration rejected at construction"""
    pass


class InvalidSweepBlock(ConfigurationError):
    def __init__(self, sweep_block: int, migration_block: int):
        self.sweep_block = sweep_block
        self.migration_block = migration_block
        super().__init__(
            f"Sweep block {sweep_block} must be after migration block {migration_block}"
        )


class TokenSplitTooHigh(ConfigurationError):
    def __init__(self, token_split: int, max_split: int):
        self.token_split = token_split
        self.max_split = max_split
        super().__init__(f"Token split {token_split} bps must be below {max_split} bps")


class InvalidTickSpacing(ConfigurationError):
    def __init__(self, tick_spacing: int, min_spacing: int, max_spacing: int):
        self.tick_spacing = tick_spacing
        super().__init__(
            f"Tick spacing {tick_spacing} out of bounds [{min_spacing}, {max_spacing}]"
        )


class InvalidFee(ConfigurationError):
    def __init__(self, fee: int, max_fee: int):
        self.fee = fee
        self.max_fee = max_fee
        super().__init__(f"LP fee {fee} exceeds maximum {max_fee}")


class InvalidPositionRecipient(ConfigurationError):
    def __init__(self, recipient: str):
        self.recipient = recipient
        super().__init__(f"Position recipient {recipient} is a reserved address")


class AuctionSupplyIsZero(ConfigurationError):
    def __init__(self, total_supply: int, token_split: int):
        self.total_supply = total_supply
        self.token_split = token_split
        super().__init__(
            f"Auction share of supply {total_supply} at split {token_split} bps is zero"
        )


# Funding / auction deployment
class AuctionValidationError(LaunchMigratorError):
    """Deployed auction or received funding does not match configuration"""
    pass


class InvalidAmountReceived(AuctionValidationError):
    def __init__(self, expected: int, received: int):
        self.expected = expected
        self.received = received
        super().__init__(f"Expected {expected} tokens, holding {received}")


class InvalidFundsRecipient(AuctionValidationError):
    def __init__(self, funds_recipient: str, expected: str):
        self.funds_recipient = funds_recipient
        self.expected = expected
        super().__init__(f"Auction funds recipient {funds_recipient} is not {expected}")


class InvalidEndBlock(AuctionValidationError):
    def __init__(self, end_block: int, migration_block: int):
        self.end_block = end_block
        self.migration_block = migration_block
        super().__init__(
            f"Auction end block {end_block} must be before migration block {migration_block}"
        )


class InvalidCurrency(AuctionValidationError):
    def __init__(self, auction_currency: str, expected: str):
        self.auction_currency = auction_currency
        self.expected = expected
        super().__init__(f"Auction currency {auction_currency} does not match {expected}")


# Migration time
class MigrationError(LaunchMigratorError):
    """Migration attempt rejected"""
    pass


class MigrationNotAllowed(MigrationError):
    def __init__(self, migration_block: int, current_block: int):
        self.migration_block = migration_block
        self.current_block = current_block
        super().__init__(
            f"Migration not allowed before block {migration_block} (current {current_block})"
        )


class CurrencyAmountTooHigh(MigrationError):
    def __init__(self, currency_amount: int, max_amount: int):
        self.currency_amount = currency_amount
        self.max_amount = max_amount
        super().__init__(f"Raised amount {currency_amount} exceeds {max_amount}")


class NoCurrencyRaised(MigrationError):
    def __init__(self):
        super().__init__("Auction raised no currency")


class InsufficientCurrency(MigrationError):
    def __init__(self, required: int, balance: int):
        self.required = required
        self.balance = balance
        super().__init__(f"Holding {balance} currency, auction reported {required}")


class InvalidPrice(MigrationError):
    def __init__(self, price: int):
        self.price = price
        super().__init__(f"Price {price} is outside the pool's valid range")


class InvalidStateTransition(LaunchMigratorError):
    def __init__(self, operation: str, state):
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot {operation} in state {state.value}")


# Plan builder (internal)
class PlanBuilderError(LaunchMigratorError):
    """Internal plan construction failure"""
    pass


class PlanCapacityExceeded(PlanBuilderError):
    def __init__(self, capacity: int):
        self.capacity = capacity
        super().__init__(f"Plan capacity of {capacity} actions exceeded")


# Sweep time
class SweepError(LaunchMigratorError):
    pass


class SweepNotAllowed(SweepError):
    def __init__(self, sweep_block: int, current_block: int):
        self.sweep_block = sweep_block
        self.current_block = current_block
        super().__init__(f"Sweep not allowed before block {sweep_block} (current {current_block})")


class NotOperator(SweepError):
    def __init__(self, caller: str, operator: str):
        self.caller = caller
        self.operator = operator
        super().__init__(f"Caller {caller} is not the operator {operator}")


# Governed strategy
class GovernanceError(LaunchMigratorError):
    pass


class SwapsNotAllowed(GovernanceError):
    def __init__(self):
        super().__init__("Swaps are blocked until governance approval")


class NotGovernance(GovernanceError):
    def __init__(self, caller: str, governance: str):
        self.caller = caller
        self.governance = governance
        super().__init__(f"Caller {caller} is not governance {governance}")


# Hook identity
class HookAddressError(LaunchMigratorError):
    pass


class AddressNotBound(HookAddressError):
    def __init__(self):
        super().__init__("Orchestrator address has not been bound")


class AddressAlreadyBound(HookAddressError):
    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Orchestrator address already bound to {address}")


class HookAddressNotValid(HookAddressError):
    def __init__(self, address: str, permissions: int):
        self.address = address
        self.permissions = permissions
        super().__init__(f"Address {address} does not encode hook permissions {permissions:#06x}")


class InvalidInitializer(HookAddressError):
    def __init__(self, sender: str):
        self.sender = sender
        super().__init__(f"Pool can only be initialized by its hook, not {sender}")


class SaltNotFound(HookAddressError):
    def __init__(self, iterations: int):
        self.iterations = iterations
        super().__init__(f"No salt found in {iterations} iterations")


# Host simulation
class SimulationError(LaunchMigratorError):
    """Failure raised by a simulated collaborator"""
    pass


class InsufficientBalance(SimulationError):
    def __init__(self, asset: str, holder: str, balance: int, amount: int):
        self.asset = asset
        self.holder = holder
        self.balance = balance
        self.amount = amount
        super().__init__(f"{holder} holds {balance} of {asset}, needs {amount}")


class PoolAlreadyInitialized(SimulationError):
    def __init__(self, pool_id: str):
        self.pool_id = pool_id
        super().__init__(f"Pool {pool_id} already initialized")


class PoolNotInitialized(SimulationError):
    def __init__(self, pool_id: str):
        self.pool_id = pool_id
        super().__init__(f"Pool {pool_id} not initialized")


class DeadlinePassed(SimulationError):
    def __init__(self, deadline: int, timestamp: int):
        self.deadline = deadline
        self.timestamp = timestamp
        super().__init__(f"Deadline {deadline} passed (now {timestamp})")


class MaximumAmountExceeded(SimulationError):
    def __init__(self, maximum: int, amount_requested: int):
        self.maximum = maximum
        self.amount_requested = amount_requested
        super().__init__(f"Position needs {amount_requested}, maximum is {maximum}")


class CurrencyNotSettled(SimulationError):
    def __init__(self, currency: str, delta: int):
        self.currency = currency
        self.delta = delta
        super().__init__(f"Currency {currency} left with unsettled delta {delta}")
