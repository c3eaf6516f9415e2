import io

import pytest

from minishell.lexer import (
    ShellSyntaxError,
    Token,
    TokenType,
    extract_quoted,
    extract_special,
    extract_word,
    is_space,
    is_special,
    token_length,
    token_type,
    tokenize,
    tokenize_input,
)


@pytest.mark.parametrize("char,expected", [(" ", True), ("\t", True), ("\n", True), ("a", False), ("", False)])
def test_is_space(char, expected):
    assert is_space(char) is expected


@pytest.mark.parametrize("char,expected", [("|", True), ("<", True), (">", True), ("&", False), ("", False)])
def test_is_special(char, expected):
    assert is_special(char) is expected


@pytest.mark.parametrize(
    "text,expected",
    [
        ("|", TokenType.PIPE),
        ("<", TokenType.REDIR_IN),
        (">", TokenType.REDIR_OUT),
        (">>", TokenType.APPEND),
        ("<<", TokenType.HEREDOC),
        ("ls", TokenType.WORD),
        ("word", TokenType.WORD),
        (None, TokenType.WORD),
    ],
)
def test_token_type(text, expected):
    assert token_type(text) is expected


def test_token_length():
    assert token_length("a>>b", 1) == 2
    assert token_length("a>>b", 0) == 1
    assert token_length("a|b", 1) == 1
    assert token_length("abc def", 0) == 3


def test_extract_quoted_single():
    assert extract_quoted("'abc'x", 0) == ("abc", 5, True)


def test_extract_quoted_double():
    assert extract_quoted('x"a b"', 1) == ("a b", 6, False)


def test_extract_quoted_unclosed():
    with pytest.raises(ShellSyntaxError) as info:
        extract_quoted("'abc", 0)
    assert info.value.token == "`newline'"
    assert info.value.status == 2


def test_extract_quoted_requires_quote():
    with pytest.raises(ValueError):
        extract_quoted("abc", 0)


def test_extract_special():
    assert extract_special(">>x", 0) == (">>", 2)
    assert extract_special("<<x", 0) == ("<<", 2)
    assert extract_special("|x", 0) == ("|", 1)
    assert extract_special("<x", 0) == ("<", 1)


def test_extract_word_stops_at_blank():
    assert extract_word("ab cd", 0) == ("ab", 2)
    assert extract_word("ab cd", 3) == ("cd", 5)


def test_tokenize_input_types():
    tokens = tokenize_input("ls -l | wc >> out")
    assert [t.type for t in tokens] == [
        TokenType.WORD,
        TokenType.WORD,
        TokenType.PIPE,
        TokenType.WORD,
        TokenType.APPEND,
        TokenType.WORD,
    ]
    assert [t.value for t in tokens] == ["ls", "-l", "|", "wc", ">>", "out"]


def test_tokenize_input_joins_quoted():
    assert tokenize_input("'a b'c") == [Token(TokenType.WORD, "a bc")]


def test_tokenize_input_unclosed_quote():
    with pytest.raises(ShellSyntaxError):
        tokenize_input('echo "oops')


def test_tokenize_expands_variables():
    result = tokenize("echo $HOME", ["HOME=/home/user"])
    assert result.tokens == ["echo", "/home/user"]
    assert result.quoted is False


def test_tokenize_single_quotes_keep_dollar():
    result = tokenize("echo '$HOME'", ["HOME=/home/user"])
    assert result.tokens == ["echo", "$HOME"]
    assert result.quoted is True


def test_tokenize_double_quotes_expand():
    result = tokenize('echo "$HOME"', ["HOME=/home/user"])
    assert result.tokens == ["echo", "/home/user"]
    assert result.quoted is True


def test_tokenize_operators_without_spaces():
    assert tokenize("a>>b|c<d").tokens == ["a", ">>", "b", "|", "c", "<", "d"]


def test_tokenize_drops_empty_words():
    result = tokenize('echo "" $MISSING')
    assert result.tokens == ["echo"]
    assert result.quoted is False


def test_tokenize_exit_status():
    assert tokenize("echo $?", [], 42).tokens == ["echo", str(42)]


def test_tokenize_squashes_unquoted_value_only():
    lines = ["X=a   b"]
    assert tokenize("$X", lines).tokens == ["a b"]
    assert tokenize('"$X"', lines).tokens == ["a   b"]


def test_tokenize_dollar_zero_writes_name():
    out = io.StringIO()
    result = tokenize("echo $0", [], 0, out)
    assert out.getvalue() == "Minishell\n"
    assert result.tokens == ["echo"]


def test_tokenize_unclosed_quote():
    with pytest.raises(ShellSyntaxError) as info:
        tokenize("echo 'abc")
    assert "`newline'" in str(info.value)


def test_tokenize_blank_line():
    assert tokenize("   \t ").tokens == []