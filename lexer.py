import unicodedata

KEYWORD = "KEYWORD"
IDENT = "IDENT"
NUMBER = "NUMBER"
STRING = "STRING"
OP = "OP"
PUNCT = "PUNCT"
UNKNOWN = "UNKNOWN"
EOF = "EOF"

# Canonical keywords. Everything else that looks like a word is an identifier.
KEYWORDS = frozenset({
    "ye",         # let
    "sthayi",     # const
    "bol",        # print
    "agar",       # if
    "nahitoh",    # else if
    "warna",      # else
    "lagataar",   # while
    "jabtak",     # for
    "wapas",      # return
    "ruk",        # break
    "chhod",      # continue
    "karya",      # function
    "aasynk",     # async
    "pratiksha",  # await
    "lao",        # fetch
    "aayaat",     # import
    "niryaat",    # export
    "se",         # from
})

# Alternate surface spellings, normalized before classification.
KEYWORD_ALIASES = {
    "mangao": "lao",
    "bolo": "bol",
    "nahito": "nahitoh",
}

OPERATOR_CHARS = "+-*/%=<>!&|"
PUNCTUATION_CHARS = "(){};,."
DIGITS = "0123456789"

# Two-character operators: first char -> allowed second chars
TWO_CHAR_OPERATORS = {
    ">": "=",
    "<": "=",
    "=": "=>",
    "!": "=",
    "&": "&",
    "|": "|",
}


class Token:
    def __init__(self, type, value=None, line=1, column=1):
        self.type = type
        self.value = value
        self.line = line
        self.column = column

    def is_(self, type, value=None):
        if self.type != type:
            return False
        return value is None or self.value == value

    def __repr__(self):
        if self.value is not None:
            return f"{self.type}({self.value!r})"
        return f"{self.type}"


def normalize_word(word):
    return KEYWORD_ALIASES.get(word, word)


def is_word_char(ch):
    # combining marks (Devanagari matras, virama) continue a word
    return ch.isalnum() or ch == "_" or unicodedata.category(ch).startswith("M")


class Lexer:
    def __init__(self, text):
        self.text = text
        self.pos = 0
        self.current_char = text[0] if text else None
        self.line = 1
        self.column = 1

    def advance(self):
        # track line/column based on current_char before moving
        if self.current_char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.pos += 1
        if self.pos >= len(self.text):
            self.current_char = None
        else:
            self.current_char = self.text[self.pos]

    def peek(self):
        nxt = self.pos + 1
        if nxt >= len(self.text):
            return None
        return self.text[nxt]

    def skip_whitespace(self):
        while self.current_char is not None and self.current_char.isspace():
            self.advance()

    def skip_comment(self):
        while self.current_char is not None and self.current_char != "\n":
            self.advance()

    def read_word(self):
        start_line, start_col = self.line, self.column
        result = ""
        while self.current_char is not None and is_word_char(self.current_char):
            result += self.current_char
            self.advance()

        word = normalize_word(result)
        if word in KEYWORDS:
            return Token(KEYWORD, word, line=start_line, column=start_col)
        return Token(IDENT, word, line=start_line, column=start_col)

    def read_number(self):
        start_line, start_col = self.line, self.column
        result = ""
        while self.current_char is not None and self.current_char in DIGITS:
            result += self.current_char
            self.advance()
        return Token(NUMBER, int(result), line=start_line, column=start_col)

    def read_string(self):
        # No escapes. An unterminated string keeps whatever was captured.
        start_line, start_col = self.line, self.column
        quote = self.current_char
        self.advance()  # skip opening quote
        result = ""
        while self.current_char is not None and self.current_char != quote:
            result += self.current_char
            self.advance()

        if self.current_char == quote:
            self.advance()  # skip closing quote
        return Token(STRING, result, line=start_line, column=start_col)

    def read_operator(self):
        start_line, start_col = self.line, self.column
        op = self.current_char
        nxt = self.peek()
        self.advance()
        if nxt is not None and nxt in TWO_CHAR_OPERATORS.get(op, ""):
            op += nxt
            self.advance()
        return Token(OP, op, line=start_line, column=start_col)

    def get_next_token(self):
        while self.current_char is not None:

            if self.current_char.isspace():
                self.skip_whitespace()
                continue

            # comments must win over the '/' operator
            if self.current_char == "/" and self.peek() == "/":
                self.skip_comment()
                continue

            # identifiers / keywords
            if self.current_char.isalpha() or self.current_char == "_":
                return self.read_word()

            if self.current_char in DIGITS:
                return self.read_number()

            if self.current_char in "\"'":
                return self.read_string()

            if self.current_char in OPERATOR_CHARS:
                return self.read_operator()

            if self.current_char in PUNCTUATION_CHARS:
                tok = Token(PUNCT, self.current_char, line=self.line, column=self.column)
                self.advance()
                return tok

            tok = Token(UNKNOWN, self.current_char, line=self.line, column=self.column)
            self.advance()
            return tok

        return Token(EOF, line=self.line, column=self.column)

    def tokens(self):
        """Yield every remaining token once, without the trailing EOF."""
        while True:
            tok = self.get_next_token()
            if tok.type == EOF:
                return
            yield tok


def tokenize(text):
    return list(Lexer(text).tokens())
