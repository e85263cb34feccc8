#!/usr/bin/env python3
"""
notation_compiler.py
Single-file front end for algebraic expressions (shorthand translation → lexer
→ validator → recursive-descent parser → three-address code).

Shorthand accepted on input:
    \\N/x        N-th root of x (\\x alone is the square root)
    log_b(x)    logarithm of x in base b (plain log(x) is base 10)
"""

import argparse
import logging
import re
import sys
from collections import namedtuple

logger = logging.getLogger(__name__)

# =====================================================
# CONFIGURATION
# =====================================================
MAX_DEPTH = 64
FUNCTIONS = ('log', 'sqrt', 'pow')
GREEDY_FUNCTIONS = ('log', 'sqrt')
OPERATORS = '+-*/^'
DEFAULT_LOG_BASE = '10'
PLACEHOLDER_MARK = '&'

# =====================================================
# DIAGNOSTICS & ERRORS
# =====================================================
MALFORMED_NUMBER = 'MalformedNumber'
UNBALANCED_GROUPING = 'UnbalancedGrouping'
OPERATOR_REPETITION = 'OperatorRepetition'
INCOMPLETE_OPERATION = 'IncompleteOperation'
INVALID_LOGARITHM = 'InvalidLogarithmSyntax'
INVALID_RADICAL = 'InvalidRadicalSyntax'
UNEXPECTED_CHARACTER = 'UnexpectedCharacter'
EMPTY_EXPRESSION = 'EmptyExpression'
UNEXPECTED_TOKEN = 'UnexpectedToken'
UNEXPECTED_END = 'UnexpectedEnd'
NESTING_TOO_DEEP = 'NestingTooDeep'


class Diagnostic(namedtuple('Diagnostic', ['kind', 'message', 'pos'], defaults=(None,))):
    __slots__ = ()

    def __str__(self):
        return f"{self.kind}: {self.message}"


class ExpressionError(Exception):
    """Raised when a line is rejected; carries every diagnostic found."""

    def __init__(self, diagnostics):
        self.diagnostics = list(diagnostics)
        super().__init__("; ".join(str(d) for d in self.diagnostics) or "Expression contains errors")


class TranslationError(ExpressionError):
    """Fatal error while rewriting shorthand notation."""

    def __init__(self, kind, message, pos=None):
        super().__init__([Diagnostic(kind, message, pos)])


class ParseError(ExpressionError):
    def __init__(self, kind, message, pos=None):
        super().__init__([Diagnostic(kind, message, pos)])

# =====================================================
# NOTATION TRANSLATOR
# =====================================================
SHORTHAND_RE = re.compile(r'[\\_&]')
PLACEHOLDER_RE = re.compile(r'&\d+', re.ASCII)
NUMBER_RE = re.compile(r'\d+\.?\d*|\.\d+', re.ASCII)
ATOM_RE = re.compile(r'\d+\.?\d*|\.\d+|[A-Za-z]+', re.ASCII)
LEXEME_RE = re.compile(r'(?P<number>\d+\.?\d*|\.\d+|\.)|(?P<word>[A-Za-z]+)|(?P<space>\s+)|(?P<other>.)', re.ASCII)

GroupMap = namedtuple('GroupMap', ['parens', 'radicals'])
# text: the operand as written in canonical form
# bare: the same without the outer parentheses of a group
# end: index just past the operand in the source line
Operand = namedtuple('Operand', ['text', 'bare', 'end'])


class PlaceholderTable:
    """Placeholder -> canonical text of the group it replaced."""

    def __init__(self):
        self.entries = {}
        self._next_id = 0

    def add(self, text):
        ref = f"{PLACEHOLDER_MARK}{self._next_id}"
        self._next_id += 1
        self.entries[ref] = text
        return ref

    def __contains__(self, ref):
        return ref in self.entries

    def __getitem__(self, ref):
        return self.entries[ref]

    def __len__(self):
        return len(self.entries)

    def resolve(self, text):
        """Replace every placeholder in *text*, nested ones first."""
        return PLACEHOLDER_RE.sub(lambda m: self.resolve(self.entries[m.group()]), text)


class BracketScanner:
    """
    Right-to-left matcher for '(' ')' pairs and '\\' '/' radical pairs.

    A '/' closes the nearest '\\' to its left only when both sit at the same
    parenthesis depth; every other '/' is a division.
    """

    def __init__(self, text):
        self.text = text
        self.pos = len(text)

    def scan(self):
        parens = {}
        radicals = {}
        closers = []
        pending = [[]]  # unclaimed '/' positions, one list per parenthesis depth
        while self.pos > 0:
            self.pos -= 1
            ch = self.text[self.pos]
            if ch == ')':
                closers.append(self.pos)
                pending.append([])
            elif ch == '(':
                if not closers:
                    raise TranslationError(
                        UNBALANCED_GROUPING,
                        f"Unmatched opening parenthesis at position {self.pos}: missing ')'",
                        self.pos)
                parens[self.pos] = closers.pop()
                pending.pop()
            elif ch == '/':
                pending[-1].append(self.pos)
            elif ch == '\\' and pending[-1]:
                radicals[self.pos] = pending[-1].pop()
        if closers:
            pos = closers[-1]
            raise TranslationError(
                UNBALANCED_GROUPING,
                f"Unmatched closing parenthesis at position {pos}: missing '('",
                pos)
        return GroupMap(parens, radicals)


class ShorthandRewriter:
    """
    Rewrites one matched line into skeleton text.

    Every bracketed group is rewritten recursively and replaced by a
    placeholder; the caller resolves the skeleton once at the end.
    """

    def __init__(self, text, groups, placeholders, max_depth=MAX_DEPTH):
        self.text = text
        self.groups = groups
        self.placeholders = placeholders
        self.max_depth = max_depth

    def rewrite(self, start, end, depth=0):
        if depth > self.max_depth:
            raise TranslationError(NESTING_TOO_DEEP, f"expression nested deeper than {self.max_depth} levels", start)
        out = []
        pos = start
        while pos < end:
            ch = self.text[pos]
            if ch == '(':
                close = self.groups.parens[pos]
                out.append(f"({self.group(pos, close, depth)})")
                pos = close + 1
            elif ch == '\\':
                piece, pos = self.radical(pos, end, depth)
                self._emit_call(out, piece)
            elif ch.isascii() and ch.isalpha():
                word_end = self._word_end(pos, end)
                if self._is_log_shorthand(pos, word_end, end):
                    piece, pos = self.logarithm(pos, word_end, end, depth)
                    self._emit_call(out, piece)
                else:
                    out.append(self.text[pos:word_end])
                    pos = word_end
            elif ch == '_':
                raise TranslationError(INVALID_LOGARITHM, f"'_' at position {pos} is only valid in log_b(x)", pos)
            else:
                out.append(ch)
                pos += 1
        return ''.join(out)

    def group(self, open_pos, close_pos, depth):
        return self.placeholders.add(self.rewrite(open_pos + 1, close_pos, depth + 1))

    def radical(self, pos, end, depth):
        """Rewrite the radical whose '\\' is at *pos*; returns (text, next_pos)."""
        close = self.groups.radicals.get(pos)
        if close is None:
            index = None
            radicand_pos = pos + 1
        else:
            index = self.rewrite(pos + 1, close, depth + 1).strip()
            if not index:
                raise TranslationError(INVALID_RADICAL, f"Empty radical index at position {pos}", pos)
            radicand_pos = close + 1
        radicand = self.operand(radicand_pos, end, depth + 1, INVALID_RADICAL, "radicand")
        if index is None or index == '2':
            return f"sqrt({radicand.bare})", radicand.end
        if not NUMBER_RE.fullmatch(index):
            resolved = self.placeholders.resolve(index)
            index = self.placeholders.add(index)
            if not ATOM_RE.fullmatch(resolved):
                index = f"({index})"
        return f"pow({radicand.bare},1/{index})", radicand.end

    def logarithm(self, pos, marker, end, depth, standalone=True):
        """Rewrite log_b(x) starting at *pos*; *marker* is the index of '_'."""
        base = self.operand(marker + 1, end, depth + 1, INVALID_LOGARITHM, "logarithm base")
        arg_pos = base.end
        if arg_pos >= end or self.text[arg_pos] != '(':
            raise TranslationError(
                INVALID_LOGARITHM,
                f"Logarithm at position {pos} needs a parenthesized argument: log_b(x)",
                pos)
        close = self.groups.parens[arg_pos]
        arg = self.group(arg_pos, close, depth)
        if self.placeholders.resolve(base.bare).strip() == DEFAULT_LOG_BASE:
            return f"log({arg})", close + 1
        text = f"log({arg})/log({base.bare})"
        if standalone and self._needs_parens(pos, close + 1):
            text = f"({text})"
        return text, close + 1

    def operand(self, pos, end, depth, kind, role):
        if depth > self.max_depth:
            raise TranslationError(NESTING_TOO_DEEP, f"expression nested deeper than {self.max_depth} levels", pos)
        while pos < end and self.text[pos].isspace():
            pos += 1
        if pos >= end:
            raise TranslationError(kind, f"Missing {role} at position {pos}", pos)
        ch = self.text[pos]
        if ch == '(':
            close = self.groups.parens[pos]
            ref = self.group(pos, close, depth)
            return Operand(f"({ref})", ref, close + 1)
        if ch == '\\':
            text, next_pos = self.radical(pos, end, depth)
            return Operand(text, text, next_pos)
        if ch == '-':
            inner = self.operand(pos + 1, end, depth + 1, kind, role)
            return Operand('-' + inner.text, '-' + inner.text, inner.end)
        if ch.isascii() and ch.isalpha():
            word_end = self._word_end(pos, end)
            word = self.text[pos:word_end]
            if self._is_log_shorthand(pos, word_end, end):
                text, next_pos = self.logarithm(pos, word_end, end, depth, standalone=False)
                return Operand(text, text, next_pos)
            if word in FUNCTIONS and word_end < end and self.text[word_end] == '(':
                close = self.groups.parens[word_end]
                text = f"{word}({self.group(word_end, close, depth)})"
                return Operand(text, text, close + 1)
            return Operand(word, word, word_end)
        match = NUMBER_RE.match(self.text, pos, end)
        if match:
            return Operand(match.group(), match.group(), match.end())
        raise TranslationError(kind, f"Missing {role} at position {pos}", pos)

    def _word_end(self, pos, end):
        while pos < end and self.text[pos].isascii() and self.text[pos].isalpha():
            pos += 1
        return pos

    def _is_log_shorthand(self, pos, word_end, end):
        return self.text[pos:word_end] == 'log' and word_end < end and self.text[word_end] == '_'

    def _needs_parens(self, start, stop):
        before = self.text[:start].rstrip()[-1:]
        after = self.text[stop:].lstrip()[:1]
        return before in ('/', '^') or after == '^'

    @staticmethod
    def _emit_call(out, piece):
        # a generated call glued to an operand gets an explicit '*'
        if out and re.search(r'[\w).]$', out[-1]):
            out.append('*')
        out.append(piece)


def _ends_operand(prev):
    if prev is None:
        return False
    kind, value = prev
    return kind == 'number' or (kind == 'word' and value not in FUNCTIONS) or value == ')'


def make_explicit(text):
    """
    Insert implicit multiplications and collapse repeated unary signs.

    Applying it twice gives the same result as applying it once.
    """
    lexemes = list(LEXEME_RE.finditer(text))
    out = []
    prev = None
    adjacent = False
    i = 0
    while i < len(lexemes):
        match = lexemes[i]
        kind, value = match.lastgroup, match.group()
        if kind == 'space':
            out.append(value)
            adjacent = False
            i += 1
            continue
        # a second '.' stays so the lexer reports the malformed number
        if value == '.' and not (adjacent and prev and prev[0] == 'number') and text[match.end():match.end() + 1] != '.':
            logger.debug("discarding stray decimal point at %d", match.start())
            i += 1
            continue
        if value in ('+', '-') and (prev is None or prev[1] in ('(', ',')):
            run = i
            while run < len(lexemes) and lexemes[run].group() == value:
                run += 1
            if run - i > 1:
                if value == '-' and (run - i) % 2:
                    out.append('-')
                    prev = ('other', '-')
                    adjacent = True
                i = run
                continue
        starts_operand = kind == 'word' or value == '(' or (kind == 'number' and prev and prev[0] != 'number')
        if adjacent and starts_operand and _ends_operand(prev):
            out.append('*')
        out.append(value)
        prev = (kind, value)
        adjacent = True
        i += 1
    return ''.join(out)


class NotationTranslator:
    """Rewrites shorthand roots and logarithms into canonical calls."""

    def __init__(self, max_depth=MAX_DEPTH):
        self.max_depth = max_depth
        self.placeholders = PlaceholderTable()
        self.skeleton = ''

    def translate(self, line):
        self.placeholders = PlaceholderTable()
        self.skeleton = line
        if not SHORTHAND_RE.search(line):
            return make_explicit(line)
        if PLACEHOLDER_MARK in line:
            pos = line.index(PLACEHOLDER_MARK)
            raise TranslationError(UNEXPECTED_CHARACTER, f"reserved character '{PLACEHOLDER_MARK}' at position {pos}", pos)
        groups = BracketScanner(line).scan()
        rewriter = ShorthandRewriter(line, groups, self.placeholders, self.max_depth)
        self.skeleton = rewriter.rewrite(0, len(line))
        logger.debug("skeleton %r with %d placeholders", self.skeleton, len(self.placeholders))
        return make_explicit(self.placeholders.resolve(self.skeleton))

# =====================================================
# LEXER
# =====================================================
Token = namedtuple('Token', ['type', 'value', 'pos'])


class Lexer:
    SINGLE = {**dict.fromkeys(OPERATORS, 'OP'), '(': 'LPAREN', ')': 'RPAREN', ',': 'COMMA'}

    def __init__(self, text):
        self.text = text
        self.tokens = []
        self.diagnostics = []
        self._word = ''
        self._word_start = 0
        self._number = ''
        self._number_start = 0
        self._tokenize()

    def _tokenize(self):
        i = 0
        while i < len(self.text):
            ch = self.text[i]
            if ch.isascii() and ch.isalpha():
                self._flush_number()
                if not self._word:
                    self._word_start = i
                self._word += ch
                # reserved words are split off greedily: "sqrtx" -> sqrt, x
                if self._word in GREEDY_FUNCTIONS:
                    self.tokens.append(Token('FUNC', self._word, self._word_start))
                    self._word = ''
                i += 1
                continue
            self._flush_word(i)
            if '0' <= ch <= '9' or ch == '.':
                if not self._number:
                    self._number_start = i
                self._number += ch
                i += 1
                continue
            self._flush_number()
            if ch == PLACEHOLDER_MARK and i + 1 < len(self.text) and '0' <= self.text[i + 1] <= '9':
                match = PLACEHOLDER_RE.match(self.text, i)
                self.tokens.append(Token('PLACEHOLDER', match.group(), i))
                i = match.end()
                continue
            if ch in self.SINGLE:
                self.tokens.append(Token(self.SINGLE[ch], ch, i))
            elif not ch.isspace():
                self.tokens.append(Token('UNKNOWN', ch, i))
                self.diagnostics.append(Diagnostic(UNEXPECTED_CHARACTER, f"Unexpected character {ch!r}", i))
            i += 1
        self._flush_word(len(self.text))
        self._flush_number()

    def _flush_word(self, end):
        if self._word:
            # pow is only a call when its argument list follows
            is_call = self._word == 'pow' and self.text[end:].lstrip()[:1] == '('
            self.tokens.append(Token('FUNC' if is_call else 'ID', self._word, self._word_start))
            self._word = ''

    def _flush_number(self):
        if not self._number:
            return
        if self._number == '.':
            logger.debug("discarding stray decimal point at %d", self._number_start)
        else:
            if self._number.count('.') > 1:
                self.diagnostics.append(
                    Diagnostic(MALFORMED_NUMBER, f"Invalid number format: {self._number}", self._number_start))
            self.tokens.append(Token('NUMBER', self._number, self._number_start))
        self._number = ''

    def peek_all(self):
        return list(self.tokens)

# =====================================================
# VALIDATOR
# =====================================================
def validate_tokens(tokens):
    """Collect every structural problem in *tokens*; never raises."""
    if not tokens:
        return [Diagnostic(EMPTY_EXPRESSION, "Empty expression")]
    diagnostics = []
    open_parens = []
    last = len(tokens) - 1
    for i, tok in enumerate(tokens):
        if tok.type == 'LPAREN':
            open_parens.append(tok.pos)
        elif tok.type == 'RPAREN':
            if open_parens:
                open_parens.pop()
            else:
                diagnostics.append(Diagnostic(UNBALANCED_GROUPING, "Unmatched closing parenthesis", tok.pos))
        if tok.type != 'OP':
            continue
        prev = tokens[i - 1] if i > 0 else None
        nxt = tokens[i + 1] if i < last else None
        if nxt is not None and nxt.type == 'OP':
            message = f'"{tok.value}{nxt.value}"'
            if tok.value == nxt.value == '*':
                message += ' (use "^" for exponentiation)'
            diagnostics.append(Diagnostic(OPERATOR_REPETITION, message, tok.pos))
        missing_left = tok.value != '-' and (prev is None or prev.type in ('LPAREN', 'COMMA'))
        missing_right = nxt is None or nxt.type in ('RPAREN', 'COMMA')
        if missing_left or missing_right:
            diagnostics.append(Diagnostic(INCOMPLETE_OPERATION, f'Incomplete operation near "{tok.value}"', tok.pos))
    for pos in open_parens:
        diagnostics.append(Diagnostic(UNBALANCED_GROUPING, "Unmatched opening parenthesis", pos))
    return diagnostics

# =====================================================
# AST NODES
# =====================================================
class Node:
    label = ''

    def ternary(self):
        """(left, middle, right) slots of the node."""
        return (None, None, None)

    def children(self):
        return [child for child in self.ternary() if child is not None]


class Literal(Node):
    def __init__(self, value, typ):
        self.value = value
        self.typ = typ  # 'number' | 'identifier'

    @property
    def label(self):
        return self.value


class UnaryOp(Node):
    def __init__(self, op, operand):
        self.op = op
        self.operand = operand

    @property
    def label(self):
        return self.op

    def ternary(self):
        return (None, self.operand, None)


class BinaryOp(Node):
    def __init__(self, op, left, right):
        self.op = op
        self.left = left
        self.right = right

    @property
    def label(self):
        return self.op

    def ternary(self):
        return (self.left, None, self.right)


class FunctionCall(Node):
    def __init__(self, name, argument):
        self.name = name
        self.argument = argument

    @property
    def label(self):
        return self.name

    def ternary(self):
        return (None, self.argument, None)


class Power(Node):
    label = '^'

    def __init__(self, base, exponent):
        self.base = base
        self.exponent = exponent

    def ternary(self):
        return (self.base, self.exponent, None)

# =====================================================
# PARSER (recursive-descent, precedence climbing)
# =====================================================
class Parser:
    def __init__(self, tokens, placeholders=None, max_depth=MAX_DEPTH):
        self.tokens = list(tokens)
        self.pos = 0
        self.placeholders = placeholders
        self.max_depth = max_depth
        self.depth = 0

    def peek(self):
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return Token('EOF', '', None)

    def advance(self):
        tok = self.peek()
        self.pos += 1
        return tok

    def expect(self, ttype, msg):
        tok = self.peek()
        if tok.type == ttype:
            return self.advance()
        if tok.type == 'EOF':
            raise ParseError(UNEXPECTED_END, f"{msg}, got end of input")
        raise ParseError(UNEXPECTED_TOKEN, f"{msg}, got {tok.value!r}", tok.pos)

    def parse(self):
        node = self.expression()
        tok = self.peek()
        if tok.type != 'EOF':
            raise ParseError(UNEXPECTED_TOKEN, f"unexpected {tok.value!r} after a complete expression", tok.pos)
        return node

    def expression(self):
        return self.additive()

    def additive(self):
        node = self.multiplicative()
        while self.peek().type == 'OP' and self.peek().value in ('+', '-'):
            op = self.advance().value
            node = BinaryOp(op, node, self.multiplicative())
        return node

    def multiplicative(self):
        node = self.power()
        while self.peek().type == 'OP' and self.peek().value in ('*', '/'):
            op = self.advance().value
            node = BinaryOp(op, node, self.power())
        return node

    def power(self):
        # the exponent is a primary only, so '^' chains to the left
        node = self.primary()
        while self.peek().type == 'OP' and self.peek().value == '^':
            self.advance()
            node = Power(node, self.primary())
        return node

    def primary(self):
        tok = self.peek()
        if tok.type == 'NUMBER':
            self.advance()
            return Literal(tok.value, 'number')
        if tok.type == 'ID':
            self.advance()
            return Literal(tok.value, 'identifier')
        if tok.type == 'PLACEHOLDER':
            self.advance()
            return self.placeholder(tok)
        if tok.type == 'LPAREN':
            self.advance()
            self._descend(tok)
            node = self.expression()
            self.expect('RPAREN', "missing closing parenthesis")
            self.depth -= 1
            return node
        if tok.type == 'FUNC':
            return self.call()
        if tok.type == 'OP' and tok.value == '-':
            self.advance()
            self._descend(tok)
            node = UnaryOp('-', self.primary())
            self.depth -= 1
            return node
        if tok.type == 'EOF':
            raise ParseError(UNEXPECTED_END, "unexpected end of input, expected an operand")
        raise ParseError(UNEXPECTED_TOKEN, f"unexpected token {tok.value!r} in expression", tok.pos)

    def call(self):
        tok = self.advance()
        self.expect('LPAREN', f"expected '(' after {tok.value}")
        self._descend(tok)
        first = self.expression()
        if tok.value == 'pow':
            self.expect('COMMA', "expected ',' between pow arguments")
            node = Power(first, self.expression())
        else:
            node = FunctionCall(tok.value, first)
        self.expect('RPAREN', f"missing ')' after {tok.value} argument")
        self.depth -= 1
        return node

    def placeholder(self, tok):
        if self.placeholders is None or tok.value not in self.placeholders:
            raise ParseError(UNEXPECTED_TOKEN, f"unresolved placeholder {tok.value}", tok.pos)
        self._descend(tok)
        lexer = Lexer(make_explicit(self.placeholders.resolve(tok.value)))
        diagnostics = lexer.diagnostics + validate_tokens(lexer.tokens)
        if diagnostics:
            raise ExpressionError(diagnostics)
        sub = Parser(lexer.tokens, self.placeholders, self.max_depth - self.depth)
        node = sub.parse()
        self.depth -= 1
        return node

    def _descend(self, tok):
        self.depth += 1
        if self.depth > self.max_depth:
            raise ParseError(NESTING_TOO_DEEP, f"expression nested deeper than {self.max_depth} levels", tok.pos)

# =====================================================
# TREE WALKS & RENDERING
# =====================================================
def walk_postorder(root):
    """Yield nodes children-first (left, middle, right), without recursion."""
    stack = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded:
            yield node
            continue
        stack.append((node, True))
        for child in reversed(node.children()):
            stack.append((child, False))


def render_tree(root):
    lines = []
    stack = [(root, '', True)]
    while stack:
        node, indent, last = stack.pop()
        lines.append(indent + ('└── ' if last else '├── ') + node.label)
        child_indent = indent + ('    ' if last else '│   ')
        children = node.children()
        for i in reversed(range(len(children))):
            stack.append((children[i], child_indent, i == len(children) - 1))
    return '\n'.join(lines)


C_FUNCTIONS = {'log': 'log10', 'sqrt': 'sqrt'}


def to_c_expression(root):
    rendered = {}
    for node in walk_postorder(root):
        if isinstance(node, Literal):
            text = node.value
        elif isinstance(node, BinaryOp):
            text = f"({rendered.pop(id(node.left))} {node.op} {rendered.pop(id(node.right))})"
        elif isinstance(node, Power):
            text = f"pow({rendered.pop(id(node.base))}, {rendered.pop(id(node.exponent))})"
        elif isinstance(node, FunctionCall):
            text = f"{C_FUNCTIONS[node.name]}({rendered.pop(id(node.argument))})"
        else:
            text = f"(-{rendered.pop(id(node.operand))})"
        rendered[id(node)] = text
    return rendered[id(root)]

# =====================================================
# IR (TAC) GENERATION
# =====================================================
BINARY_OPS = {'+': 'add', '-': 'sub', '*': 'mul', '/': 'div'}
BINARY_SYMBOLS = {name: sym for sym, name in BINARY_OPS.items()}


class TACInstruction:
    def __init__(self, op, dest, arg1=None, arg2=None):
        self.op = op
        self.dest = dest
        self.arg1 = arg1
        self.arg2 = arg2

    def __repr__(self):
        if self.op == 'load':
            return f"a[{self.dest}] = {self.arg1}"
        if self.op in BINARY_SYMBOLS:
            return f"a[{self.dest}] = a[{self.arg1}] {BINARY_SYMBOLS[self.op]} a[{self.arg2}]"
        if self.op == 'pow':
            return f"a[{self.dest}] = pow(a[{self.arg1}], a[{self.arg2}])"
        if self.op == 'neg':
            return f"a[{self.dest}] = -a[{self.arg1}]"
        return f"a[{self.dest}] = {self.op}(a[{self.arg1}])"


class IRGenerator:
    def __init__(self):
        self.tac = []
        self.next_register = 0

    def new_register(self):
        index = self.next_register
        self.next_register += 1
        return index

    def gen(self, root):
        self.tac = []
        self.next_register = 0
        registers = {}
        for node in walk_postorder(root):
            # children were visited first, so their registers already exist
            dest = self.new_register()
            if isinstance(node, Literal):
                instr = TACInstruction('load', dest, node.value)
            elif isinstance(node, BinaryOp):
                instr = TACInstruction(BINARY_OPS[node.op], dest, registers[id(node.left)], registers[id(node.right)])
            elif isinstance(node, Power):
                instr = TACInstruction('pow', dest, registers[id(node.base)], registers[id(node.exponent)])
            elif isinstance(node, FunctionCall):
                instr = TACInstruction(node.name, dest, registers[id(node.argument)])
            else:
                instr = TACInstruction('neg', dest, registers[id(node.operand)])
            registers[id(node)] = dest
            self.tac.append(instr)
        return self.tac

# =====================================================
# COMPILER DRIVER
# =====================================================
Compilation = namedtuple('Compilation', ['canonical', 'tokens', 'ast', 'tac'])


def compile_expression(line, max_depth=MAX_DEPTH):
    """Run the whole pipeline on one line; raises ExpressionError when rejected."""
    canonical = NotationTranslator(max_depth).translate(line)
    lexer = Lexer(canonical)
    diagnostics = lexer.diagnostics + validate_tokens(lexer.tokens)
    if diagnostics:
        raise ExpressionError(diagnostics)
    ast = Parser(lexer.tokens, max_depth=max_depth).parse()
    return Compilation(canonical, lexer.peek_all(), ast, IRGenerator().gen(ast))


def compile_source(line, max_depth=MAX_DEPTH):
    result = {
        'source': line,
        'canonical': '',
        'tokens': [],
        'ast': None,
        'tree': '',
        'tac': [],
        'c_code': '',
        'errors': [],
    }
    try:
        compiled = compile_expression(line, max_depth)
    except ExpressionError as exc:
        result['errors'] = [str(d) for d in exc.diagnostics]
        logger.debug("rejected %r: %s", line, exc)
        return result

    result['canonical'] = compiled.canonical
    result['tokens'] = compiled.tokens
    result['ast'] = compiled.ast
    result['tree'] = render_tree(compiled.ast)
    result['tac'] = compiled.tac
    result['c_code'] = to_c_expression(compiled.ast)
    logger.debug("compiled %r -> %r (%d instructions)", line, compiled.canonical, len(compiled.tac))
    return result


def main(argv=None):
    arg_parser = argparse.ArgumentParser(
        description="Algebraic notation compiler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  notation-compiler '\\2/(a*8-8)'
  notation-compiler 'log_2(8)' --code
  notation-compiler '2^3+1' -t -c
        """,
    )
    arg_parser.add_argument("expression", help="expression in shorthand or canonical notation")
    arg_parser.add_argument("-t", "--tree", action="store_true", help="print the expression tree")
    arg_parser.add_argument("-c", "--code", action="store_true", help="print the three-address code")
    arg_parser.add_argument("--c-expr", action="store_true", help="print the expression as C source")
    arg_parser.add_argument(
        "--max-depth", type=int, default=MAX_DEPTH, metavar="N", help="maximum nesting depth (default: %(default)s)"
    )
    arg_parser.add_argument("-V", "--verbose", action="store_true", help="enable verbose output")
    args = arg_parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(message)s",
    )

    result = compile_source(args.expression, max_depth=args.max_depth)
    if result['errors']:
        print("Errors found:", file=sys.stderr)
        for err in result['errors']:
            print(f"  {err}", file=sys.stderr)
        return 1

    show_all = not (args.tree or args.code or args.c_expr)
    print(result['canonical'])
    if show_all or args.tree:
        print(result['tree'])
    if show_all or args.code:
        for instr in result['tac']:
            print(repr(instr))
    if show_all or args.c_expr:
        print(result['c_code'])
    return 0


if __name__ == '__main__':
    sys.exit(main())
