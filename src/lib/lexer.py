"""
Custom Pygments lexer for literate Markdown documents

Highlights the parts of a document the tangler gives meaning to, so .lmd
sources read well in documentation and editors.

Token types:
- Keyword: Line directives (! include, ! if, ! elsif, ! else, ! end)
- Name.Tag: Block names in fence headers
- Name.Builtin: Fence language tags
- Operator: Replacement marker (=) and extension marker (!)
- Name.Variable: Macro names inside ⦅ ⦆
- Name.Function: Filter names in a macro's filter chain
- String.Escape: Escaped delimiters (\\⦅ \\⦆)
- Text: Everything else
"""

from pygments.lexer import RegexLexer, bygroups, default
from pygments.token import (
    Text,
    Punctuation,
    Name,
    String,
    Keyword,
    Operator,
    Comment,
    Generic,
)


class LiterateLexer(RegexLexer):
    """
    Lexer for literate Markdown consumed by mdtangle

    Example:
        ``` python =main
        print(⦅greeting | double_quote⦆)
        ```

    Tokens:
        ``` → Punctuation
        python → Name.Builtin
        = → Operator
        main → Name.Tag
        ⦅ → Punctuation
        greeting → Name.Variable
        | → Operator
        double_quote → Name.Function
    """

    name = 'Literate Markdown'
    aliases = ['lmd', 'mdtangle']
    filenames = ['*.lmd']

    tokens = {
        'root': [
            # Includes keep their link target visible
            (r'^(!)([ \t]+)(include)([ \t]+)(\[)([^\n]*)(\]\()([^\n]*)(\))([ \t]*\n?)',
             bygroups(Operator, Text, Keyword, Text, Punctuation, String,
                      Punctuation, String.Other, Punctuation, Text)),

            (r'^(!)([ \t]+)(include-path)([ \t]+)([^\n]*\n?)',
             bygroups(Operator, Text, Keyword, Text, String.Other)),

            # Conditionals: the expression is extension code
            (r'^(!)([ \t]+)(if|elsif)([ \t]+)([^\n]*\n?)',
             bygroups(Operator, Text, Keyword, Text, Comment.Preproc)),

            (r'^(!)([ \t]+)(else|end)([ \t]*\n?)',
             bygroups(Operator, Text, Keyword, Text)),

            # Extension fence
            (r'^([ \t]*)(```)( *)(\w+)( *)(!)([^\n]*\n?)',
             bygroups(Text, Punctuation, Text, Name.Builtin, Text, Operator, Comment)),

            # Named / root fence header, or closing fence
            (r'^([ \t]*)(```)( *)(\w*)( *)(=?)([-\w]*)([^\n]*\n?)',
             bygroups(Text, Punctuation, Text, Name.Builtin, Text, Operator, Name.Tag, Text)),

            # Markdown headings
            (r'^#{1,6}[^\n]*\n?', Generic.Heading),

            (r'\\[⦅⦆]', String.Escape),

            (r'⦅', Punctuation, 'macro'),

            (r'[^\\⦅\n]+', Text),
            (r'\n', Text),
            (r'.', Text),
        ],

        'macro': [
            (r'⦆', Punctuation, '#pop'),
            (r'(\|)( *)([-\w]+)', bygroups(Operator, Text, Name.Function)),
            (r'[-\w]+', Name.Variable),
            (r' +', Text),
            # Anything else means this was never a macro reference
            default('#pop'),
        ],
    }


def get_lexer() -> LiterateLexer:
    """
    Get the LiterateLexer instance

    Returns:
        LiterateLexer instance ready for use with Pygments
    """
    return LiterateLexer()
