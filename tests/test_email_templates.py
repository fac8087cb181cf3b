from app.services.digest_service import DigestEntry, DigestSummary
from app.services.email.templates import digest_subject, render_digest, render_verification

LIST_URL = "https://gifts.example.com/list/abc"
UNSUBSCRIBE_URL = "https://gifts.example.com/unsubscribe?token=tok123"


def _render(summary: DigestSummary, list_name: str = "Birthday") -> str:
    return render_digest(list_name, summary, LIST_URL, UNSUBSCRIBE_URL)


def test_digest_lists_every_item_once():
    summary = DigestSummary(
        item_added=[DigestEntry("Blue Mug"), DigestEntry("Wool Socks")],
        item_claimed=[DigestEntry("Desk Lamp", "Ana")],
        item_unclaimed=[DigestEntry("Board Game")],
        item_removed=[DigestEntry("Glass Vase")],
    )

    html = _render(summary)

    for name in ("Blue Mug", "Wool Socks", "Desk Lamp", "Board Game", "Glass Vase"):
        assert html.count(name) == 1
    assert "New items (2)" in html
    assert "Items claimed (1)" in html
    assert "by Ana" in html
    assert "5 changes" in html
    assert LIST_URL in html
    assert "token=tok123" in html


def test_sections_follow_fixed_order():
    summary = DigestSummary(
        item_removed=[DigestEntry("Gone")],
        item_added=[DigestEntry("New")],
        item_claimed=[DigestEntry("Taken")],
        item_unclaimed=[DigestEntry("Back")],
    )
    html = _render(summary)
    positions = [html.index(title) for title in ("New items", "Items claimed", "Items unclaimed", "Removed items")]
    assert positions == sorted(positions)


def test_empty_sections_are_omitted():
    html = _render(DigestSummary(item_added=[DigestEntry("Only one")]))
    assert "1 change</strong>" in html
    assert "Items claimed" not in html
    assert "Removed items" not in html


def test_claim_without_claimer_has_no_by_line():
    html = _render(DigestSummary(item_claimed=[DigestEntry("Lamp", None)]))
    assert "claimed-by" not in html.split("</style>", 1)[1]


def test_user_text_is_escaped():
    summary = DigestSummary(
        item_added=[DigestEntry("<b>X</b>")],
        item_claimed=[DigestEntry("Tom & Jerry's \"set\"", "<script>alert(1)</script>")],
    )

    html = _render(summary, list_name="<i>Mine</i>")

    assert "<b>X</b>" not in html
    assert "&lt;b&gt;X&lt;/b&gt;" in html
    assert "<script>" not in html
    assert "&lt;i&gt;Mine&lt;/i&gt;" in html
    assert "Tom &amp; Jerry&#39;s &#34;set&#34;" in html


def test_digest_subject():
    assert digest_subject("Birthday") == "[Birthday] Updates on your wishlist"


def test_verification_email():
    subject, html = render_verification("Wedding <3", "https://gifts.example.com/verify-subscription?token=t1")

    assert subject == "Verify your subscription to Wedding <3"
    assert "Wedding &lt;3" in html
    assert html.count("https://gifts.example.com/verify-subscription?token=t1") == 2
    assert "expires in 24 hours" in html
