"""Fluent builders turning declarative mock rules into server rules."""

from mockthereum.builders.call import CallRuleBuilder
from mockthereum.builders.rule_chain import ArgumentError, RuleChain
from mockthereum.builders.single_value import (
    SingleValueRuleBuilder,
    balance_rule,
    block_number_rule,
    gas_price_rule,
)
from mockthereum.builders.transaction import TransactionReceiptRuleBuilder, TransactionRuleBuilder

__all__ = [
    "ArgumentError",
    "CallRuleBuilder",
    "RuleChain",
    "SingleValueRuleBuilder",
    "TransactionReceiptRuleBuilder",
    "TransactionRuleBuilder",
    "balance_rule",
    "block_number_rule",
    "gas_price_rule",
]
