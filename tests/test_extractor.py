"""Tests for product / article extraction and markup cleaning."""

from __future__ import annotations

from bookcard.scraper.extractor import clean_html, extract_article, extract_commerce
from bookcard.scraper.models import ArticleText, CommerceRecord

_SOURCE = "https://www.amazon.co.jp/dp/4150117268"

_PRODUCT_HTML = """\
<html>
<head><title>Amazon.co.jp: Dune</title></head>
<body>
<div id="wayfinding-breadcrumbs_feature_div">
  <ul>
    <li><a class="a-link-normal a-color-tertiary" href="/b?node=465392">Books</a></li>
    <li><a class="a-link-normal a-color-tertiary" href="/b?node=466294">Science Fiction &amp; Fantasy</a></li>
  </ul>
</div>
<span id="productTitle" class="a-size-extra-large">  Dune  </span>
<div id="bylineInfo"><span class="author"><a class="a-link-normal" href="/Frank-Herbert/e/B000APF21M">Frank Herbert</a></span></div>
<div id="bookDescription_feature_div"><div class="a-expander-content"><p>Set on the desert planet Arrakis.</p><p>A stunning blend.</p></div></div>
</body>
</html>
"""


class TestCleanHtml:
    def test_keeps_paragraph_and_line_breaks(self) -> None:
        html = "<p>One</p><p>Two<br/>Three</p>  <b>x</b>   y"
        assert clean_html(html) == "One\n\nTwo\nThree\n\nx y"

    def test_strips_all_markup(self) -> None:
        text = clean_html('<div class="a"><span>Hello</span> <em>world</em></div>')
        assert "<" not in text and ">" not in text
        assert text == "Hello world"

    def test_drops_scripts_styles_and_comments(self) -> None:
        html = "<script>var a = 1;</script><style>.x{}</style><!-- note --><p>Body</p>"
        assert clean_html(html) == "Body"

    def test_decodes_entities(self) -> None:
        assert clean_html("Fish &amp; Chips") == "Fish & Chips"

    def test_empty_input(self) -> None:
        assert clean_html("") == ""


class TestExtractCommerce:
    def test_full_product_page(self) -> None:
        record = extract_commerce(_PRODUCT_HTML, _SOURCE)

        assert isinstance(record, CommerceRecord)
        assert record.title == "Dune"
        assert record.author == "Frank Herbert"
        assert record.category == "Science Fiction & Fantasy"
        assert record.category_url == "https://www.amazon.co.jp/b?node=466294"
        assert record.description == "Set on the desert planet Arrakis.\n\nA stunning blend."
        assert record.source_url == _SOURCE

    def test_empty_page_degrades_to_placeholders(self) -> None:
        record = extract_commerce("<html></html>", _SOURCE)

        assert record.title == "Unknown Title"
        assert record.author == "Unknown Author"
        assert record.category == "Fiction"
        assert record.category_url == ""
        assert record.description == "No summary available."

    def test_missing_description_block(self) -> None:
        html = '<span id="productTitle">Dune</span><div id="other">nothing</div>'
        assert extract_commerce(html, _SOURCE).description == "No summary available."

    def test_byline_span_author_fallback(self) -> None:
        html = (
            '<div id="bylineInfo"><span class="author">'
            '<span class="a-declarative">  Jane Doe </span></span></div>'
        )
        assert extract_commerce(html, _SOURCE).author == "Jane Doe"

    def test_byline_match_stays_inside_byline_block(self) -> None:
        html = (
            '<div id="bylineInfo"><span class="author"></span></div>'
            '<div id="formats"><span class="contribution">(Author)</span></div>'
        )
        assert extract_commerce(html, _SOURCE).author == "Unknown Author"

    def test_product_description_fallback(self) -> None:
        html = '<div id="productDescription"><p>Plain product text.</p></div>'
        assert extract_commerce(html, _SOURCE).description == "Plain product text."

    def test_expander_fallback(self) -> None:
        html = '<div class="a-expander-content a-expander-partial-collapse-content">Long blurb</div>'
        assert extract_commerce(html, _SOURCE).description == "Long blurb"

    def test_noscript_fallback_skips_empty_blocks(self) -> None:
        html = (
            '<noscript><img src="/pixel.gif"/></noscript>'
            "<noscript><div>Described without scripts.</div></noscript>"
        )
        assert extract_commerce(html, _SOURCE).description == "Described without scripts."

    def test_empty_primary_block_falls_through(self) -> None:
        html = (
            '<div id="bookDescription_feature_div">   </div>'
            '<div id="productDescription">Second choice</div>'
        )
        assert extract_commerce(html, _SOURCE).description == "Second choice"

    def test_generic_breadcrumb_triggers_tertiary_search(self) -> None:
        html = (
            '<div id="wayfinding-breadcrumbs_feature_div">'
            '<a class="a-link-normal a-color-tertiary" href="/kindle">Kindle Store</a></div>'
            '<a class="a-link-normal a-color-tertiary" href="/b?node=9">Mystery</a>'
        )
        record = extract_commerce(html, _SOURCE)
        assert record.category == "Mystery"
        assert record.category_url == "https://www.amazon.co.jp/b?node=9"

    def test_generic_breadcrumb_kept_when_nothing_better(self) -> None:
        html = (
            '<div id="wayfinding-breadcrumbs_feature_div">'
            '<a href="/kindle">Kindle Store</a></div>'
        )
        assert extract_commerce(html, _SOURCE).category == "Kindle Store"

    def test_tertiary_search_without_breadcrumbs(self) -> None:
        html = '<a class="a-color-tertiary a-link-normal" href="https://example.com/c">Poetry</a>'
        record = extract_commerce(html, _SOURCE)
        assert record.category == "Poetry"
        assert record.category_url == "https://example.com/c"

    def test_breadcrumb_without_href(self) -> None:
        html = '<div id="wayfinding-breadcrumbs_feature_div"><a>History</a></div>'
        record = extract_commerce(html, _SOURCE)
        assert record.category == "History"
        assert record.category_url == ""


class TestExtractArticle:
    def test_class_container_and_title(self) -> None:
        html = (
            "<html><head><title>How we scaled &amp; survived</title></head><body>"
            "<nav>Menu</nav><div class=\"post-content\"><p>First para.</p>"
            "<p>Second<br>line.</p></div></body></html>"
        )
        article = extract_article(html)

        assert isinstance(article, ArticleText)
        assert article.title == "How we scaled & survived"
        assert article.main_text == "First para.\n\nSecond\nline."

    def test_article_element_preferred_over_main(self) -> None:
        html = "<body><main><p>Main text</p><article><p>Article text</p></article></main></body>"
        assert extract_article(html).main_text == "Article text"

    def test_main_element_used_without_article(self) -> None:
        html = '<body><div class="sidebar">Side</div><main><p>Main text</p></main></body>'
        assert extract_article(html).main_text == "Main text"

    def test_content_class_before_entry_and_post(self) -> None:
        html = (
            '<body><div class="post">Post box</div><div class="entry">Entry box</div>'
            '<div class="content">Content box</div></body>'
        )
        assert extract_article(html).main_text == "Content box"

    def test_entry_class_before_post(self) -> None:
        html = '<body><div class="post">Post box</div><div class="entry">Entry box</div></body>'
        assert extract_article(html).main_text == "Entry box"

    def test_empty_container_falls_through_to_body(self) -> None:
        html = "<html><body><article>  </article><p>Body text.</p></body></html>"
        assert extract_article(html).main_text == "Body text."

    def test_falls_back_to_whole_input(self) -> None:
        assert extract_article("<p>Just text</p>").main_text == "Just text"

    def test_heading_title_fallback(self) -> None:
        assert extract_article("<h1 class=\"t\">Heading</h1><p>x</p>").title == "Heading"

    def test_missing_title(self) -> None:
        assert extract_article("<p>x</p>").title == "Unknown Title"
