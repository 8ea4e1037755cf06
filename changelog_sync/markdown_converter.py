"""
Markdown to GitBook Markdown converter.

Renders Markdown to HTML, then walks the HTML tree back into
GitBook-flavoured Markdown. Handles:
- Text blocks (paragraphs, headings, quotes)
- Inline formatting (bold, italic, strikethrough, code, links, images)
- Lists (bulleted, numbered, nested)
- Code blocks (with language)
- Tables
- Semantic callouts via conversion rules
"""

from abc import ABC, abstractmethod
from typing import Callable, Iterable, Optional

import mistune
from bs4 import BeautifulSoup, Comment, NavigableString, Tag

BLOCK_TAGS = frozenset({
    "p", "h1", "h2", "h3", "h4", "h5", "h6",
    "ul", "ol", "pre", "blockquote", "table", "div", "hr",
})

# Containers whose newline-only text children are layout noise from the renderer
BLOCK_CONTAINERS = frozenset({
    "[document]", "ul", "ol", "blockquote", "div", "section",
    "table", "thead", "tbody", "tr",
})


class ConversionRule(ABC):
    """
    A custom conversion for HTML elements.
    
    Rules are tried in registration order before the default tag
    handlers; the first rule that matches renders the element.
    """
    
    @abstractmethod
    def matches(self, node: Tag) -> bool:
        """Whether this rule handles *node*."""
    
    @abstractmethod
    def render(self, node: Tag, content: str) -> str:
        """Render *node*, given the converted Markdown of its children."""


class HintRule(ConversionRule):
    """
    Turns elements carrying a CSS class into a GitBook hint block.
    
    Example:
        <div class="changelog-breaking">Removed the v1 API</div>
        ->
        {% hint style="danger" %}
        💥 **Breaking Change**
        
        Removed the v1 API
        {% endhint %}
    """
    
    def __init__(self, css_class: str, style: str, label: str):
        self.css_class = css_class
        self.style = style
        self.label = label
    
    def matches(self, node: Tag) -> bool:
        return self.css_class in (node.get("class") or [])
    
    def render(self, node: Tag, content: str) -> str:
        return (
            f'\n\n{{% hint style="{self.style}" %}}\n'
            f"{self.label}\n\n"
            f"{content.strip()}\n"
            "{% endhint %}\n\n"
        )


BREAKING_CHANGE_RULE = HintRule("changelog-breaking", "danger", "💥 **Breaking Change**")
NEW_FEATURE_RULE = HintRule("changelog-feature", "success", "✨ **New Feature**")

DEFAULT_RULES = (BREAKING_CHANGE_RULE, NEW_FEATURE_RULE)


class MarkdownConverter:
    """
    Converts Markdown documents to GitBook Markdown.
    
    Conversion rules run first; everything no rule claims falls through
    to the per-tag handlers below.
    """
    
    def __init__(self, rules: Optional[Iterable[ConversionRule]] = None):
        """
        Initialize converter.
        
        Args:
            rules: Conversion rules, in evaluation order. Defaults to the
                breaking-change and new-feature hint rules.
        """
        self.rules: list[ConversionRule] = list(DEFAULT_RULES if rules is None else rules)
        self._markdown = mistune.create_markdown(
            escape=False,
            plugins=["strikethrough", "table"],
        )
        
        # Tag handlers
        self._handlers: dict[str, Callable[[Tag], str]] = {
            "p": self._convert_paragraph,
            "h1": self._convert_heading,
            "h2": self._convert_heading,
            "h3": self._convert_heading,
            "h4": self._convert_heading,
            "h5": self._convert_heading,
            "h6": self._convert_heading,
            "strong": self._convert_strong,
            "b": self._convert_strong,
            "em": self._convert_emphasis,
            "i": self._convert_emphasis,
            "del": self._convert_strikethrough,
            "s": self._convert_strikethrough,
            "code": self._convert_inline_code,
            "pre": self._convert_code_block,
            "a": self._convert_link,
            "img": self._convert_image,
            "br": self._convert_line_break,
            "hr": self._convert_divider,
            "blockquote": self._convert_quote,
            "ul": self._convert_list,
            "ol": self._convert_list,
            "li": self._convert_list_item,
            "table": self._convert_table,
        }
    
    def add_rule(self, rule: ConversionRule) -> None:
        """Register a custom rule after the existing ones."""
        self.rules.append(rule)
    
    def convert(self, markdown: str) -> str:
        """
        Convert a Markdown document to GitBook Markdown.
        
        Args:
            markdown: Source document. Raw HTML is allowed and is how
                authors attach rule markers (class attributes).
        
        Returns:
            The converted document.
        """
        html = self._markdown(markdown)
        return self.convert_html(html)
    
    def convert_html(self, html: str) -> str:
        """Convert an HTML fragment to GitBook Markdown."""
        soup = BeautifulSoup(html, "html.parser")
        content = self._convert_children(soup)
        return self._normalize_whitespace(content)
    
    def _convert_node(self, node) -> str:
        """Convert a single node to markdown."""
        if isinstance(node, Comment):
            return f"<!--{node}-->"
        if isinstance(node, NavigableString):
            return str(node)
        if not isinstance(node, Tag):
            return ""
        
        for rule in self.rules:
            if rule.matches(node):
                return rule.render(node, self._convert_children(node))
        
        handler = self._handlers.get(node.name)
        if handler:
            return handler(node)
        
        # Unknown tag - keep its content
        return self._convert_children(node)
    
    def _convert_children(self, node: Tag) -> str:
        """Convert all children of *node* and join the results."""
        parts = []
        in_block_container = node.name in BLOCK_CONTAINERS
        
        for child in node.children:
            if (
                in_block_container
                and isinstance(child, NavigableString)
                and not isinstance(child, Comment)
                and "\n" in child
                and not child.strip()
            ):
                continue
            parts.append(self._convert_node(child))
        
        return "".join(parts)
    
    # =========================================================================
    # Block handlers
    # =========================================================================
    
    def _convert_paragraph(self, node: Tag) -> str:
        return f"\n\n{self._convert_children(node).strip()}\n\n"
    
    def _convert_heading(self, node: Tag) -> str:
        level = int(node.name[1])
        text = self._convert_children(node).strip()
        return f"\n\n{'#' * level} {text}\n\n"
    
    def _convert_code_block(self, node: Tag) -> str:
        """Convert <pre><code class="language-x"> to a fenced block."""
        code_tag = node.find("code")
        language = ""
        if code_tag is not None:
            for css_class in code_tag.get("class") or []:
                if css_class.startswith("language-"):
                    language = css_class[len("language-"):]
                    break
            code = code_tag.get_text()
        else:
            code = node.get_text()
        
        return f"\n\n```{language}\n{code.rstrip(chr(10))}\n```\n\n"
    
    def _convert_divider(self, node: Tag) -> str:
        return "\n\n---\n\n"
    
    def _convert_quote(self, node: Tag) -> str:
        text = self._normalize_whitespace(self._convert_children(node)).strip()
        quoted = "\n".join(f"> {line}" if line else ">" for line in text.split("\n"))
        return f"\n\n{quoted}\n\n"
    
    def _convert_list(self, node: Tag) -> str:
        items = self._convert_children(node).rstrip("\n")
        return f"\n\n{items}\n\n"
    
    def _convert_list_item(self, node: Tag) -> str:
        """Convert list item; nested blocks are indented under the marker."""
        marker = "- "
        parent = node.parent
        if parent is not None and parent.name == "ol":
            siblings = parent.find_all("li", recursive=False)
            start = int(parent.get("start") or 1)
            marker = f"{start + siblings.index(node)}. "
        
        inline_parts = []
        blocks = []
        
        for child in node.children:
            if isinstance(child, Tag) and child.name in BLOCK_TAGS:
                rendered = self._convert_node(child).strip()
                # Loose lists wrap the item text in <p>
                if child.name == "p" and not blocks and not "".join(inline_parts).strip():
                    inline_parts.append(rendered)
                elif rendered:
                    blocks.append(rendered)
            else:
                inline_parts.append(self._convert_node(child))
        
        lines = [f"{marker}{''.join(inline_parts).strip()}"]
        indent = " " * len(marker)
        for block in blocks:
            lines.append(self._indent_text(block, indent))
        
        return "\n".join(lines) + "\n"
    
    def _convert_table(self, node: Tag) -> str:
        """Convert table to pipe table, header separator after a <th> row."""
        rows = []
        
        for i, row in enumerate(node.find_all("tr")):
            cells = row.find_all(["th", "td"], recursive=False)
            texts = [
                self._convert_children(cell).strip().replace("|", "\\|")
                for cell in cells
            ]
            rows.append(f"| {' | '.join(texts)} |")
            
            if i == 0 and row.find("th", recursive=False) is not None:
                separator = " | ".join("---" for _ in cells)
                rows.append(f"| {separator} |")
        
        if not rows:
            return ""
        
        return "\n\n" + "\n".join(rows) + "\n\n"
    
    # =========================================================================
    # Inline handlers
    # =========================================================================
    
    def _convert_strong(self, node: Tag) -> str:
        return f"**{self._convert_children(node)}**"
    
    def _convert_emphasis(self, node: Tag) -> str:
        return f"*{self._convert_children(node)}*"
    
    def _convert_strikethrough(self, node: Tag) -> str:
        return f"~~{self._convert_children(node)}~~"
    
    def _convert_inline_code(self, node: Tag) -> str:
        return f"`{node.get_text()}`"
    
    def _convert_link(self, node: Tag) -> str:
        text = self._convert_children(node)
        href = node.get("href")
        if not href:
            return text
        
        title = node.get("title")
        if title:
            return f'[{text}]({href} "{title}")'
        return f"[{text}]({href})"
    
    def _convert_image(self, node: Tag) -> str:
        src = node.get("src") or ""
        alt = node.get("alt") or ""
        return f"![{alt}]({src})"
    
    def _convert_line_break(self, node: Tag) -> str:
        return "\n"
    
    # =========================================================================
    # Utilities
    # =========================================================================
    
    def _indent_text(self, text: str, indent: str) -> str:
        """Add indentation to every non-empty line."""
        return "\n".join(f"{indent}{line}" if line else line for line in text.split("\n"))
    
    def _normalize_whitespace(self, content: str) -> str:
        """Normalize whitespace in the output."""
        # Remove trailing whitespace from lines
        lines = [line.rstrip() for line in content.split("\n")]
        
        # Collapse runs of blank lines into one
        result = []
        blank_count = 0
        
        for line in lines:
            if not line:
                blank_count += 1
                if blank_count <= 1:
                    result.append(line)
            else:
                blank_count = 0
                result.append(line)
        
        content = "\n".join(result).strip()
        if not content:
            return ""
        
        # Ensure single trailing newline
        return content + "\n"
