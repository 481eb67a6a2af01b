"""Registry of statement handlers for the zinja evaluator.

Maps statement node types to handler functions with the signature
handler(node, env, out, interpreter) -> Signal. The evaluator consults this
table for every body node that is not text, a comment or an expression.
"""

from zinja.types.nodes import (
    Break, CallBlock, Continue, FilterBlock, For, If, Macro, Program, Set,
)
from zinja.evaluation.statements.block_statements import program_statement
from zinja.evaluation.statements.if_statement import if_statement
from zinja.evaluation.statements.for_statement import for_statement, break_statement, continue_statement
from zinja.evaluation.statements.set_statement import set_statement
from zinja.evaluation.statements.macro_statements import macro_statement, call_block_statement
from zinja.evaluation.statements.filter_statement import filter_block_statement

STATEMENTS = {
    Program: program_statement,
    If: if_statement,
    For: for_statement,
    Break: break_statement,
    Continue: continue_statement,
    Set: set_statement,
    Macro: macro_statement,
    CallBlock: call_block_statement,
    FilterBlock: filter_block_statement,
}
