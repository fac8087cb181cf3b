from jinja2 import Environment
from markupsafe import Markup

from app.services.digest_service import DigestSummary

# Autoescaping covers & < > " ' in every user-supplied value (list names,
# item names, claimer names).
_env = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)

BASE_WRAPPER = _env.from_string("""
<div style="font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,Arial,sans-serif;font-size:16px;line-height:1.6;color:#1f2937">
  {{ body }}
  <p style="color:#6b7280;font-size:12px">clearly.gift</p>
</div>
""")

VERIFY_BODY = _env.from_string("""
<p>Hi there,</p>
<p>You're one step away from getting updates about <strong>{{ list_name }}</strong>.</p>
<p><a href="{{ verify_url }}" style="display:inline-block;padding:10px 20px;border-radius:4px;background:#069668;color:#fff;text-decoration:none">Verify your email</a></p>
<p>Or copy this link: {{ verify_url }}</p>
<p>This link expires in {{ ttl_hours }} hours.</p>
""")

DIGEST_HTML = _env.from_string("""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>List Updates: {{ list_name }}</title>
  <style>
    body {
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif;
      line-height: 1.6;
      color: #1f2937;
      background-color: #f9fafb;
      margin: 0;
      padding: 0;
    }
    .container {
      max-width: 600px;
      margin: 0 auto;
      background-color: #ffffff;
      border-radius: 8px;
      overflow: hidden;
      box-shadow: 0 1px 3px rgba(0, 0, 0, 0.1);
    }
    .header {
      background: linear-gradient(135deg, #069668 0%, #047857 100%);
      padding: 40px 32px;
      text-align: center;
      color: #ffffff;
    }
    .header h1 {
      margin: 0;
      font-size: 28px;
      font-weight: 700;
    }
    .header p {
      margin: 8px 0 0 0;
      font-size: 14px;
      opacity: 0.9;
    }
    .content {
      padding: 32px;
    }
    .summary {
      background-color: #f3f4f6;
      border-left: 4px solid #069668;
      padding: 16px;
      margin-bottom: 32px;
      border-radius: 4px;
    }
    .summary p {
      margin: 0;
      font-size: 14px;
      color: #4b5563;
    }
    .summary strong {
      color: #069668;
      font-weight: 600;
    }
    .section {
      margin-bottom: 28px;
    }
    .section-title {
      font-size: 16px;
      font-weight: 600;
      color: #1f2937;
      margin-bottom: 12px;
      padding-bottom: 8px;
      border-bottom: 2px solid #e5e7eb;
    }
    .section-icon {
      margin-right: 8px;
      font-size: 18px;
    }
    .item-list {
      list-style: none;
      margin: 0;
      padding: 0;
    }
    .item-list li {
      padding: 8px 0;
      color: #374151;
      font-size: 14px;
    }
    .item-list li:before {
      content: "\\2192";
      display: inline-block;
      margin-right: 8px;
      color: #069668;
      font-weight: 600;
      min-width: 16px;
    }
    .item-claimed {
      color: #7c3aed;
    }
    .item-list li.item-claimed:before {
      color: #7c3aed;
      content: "\\2713";
    }
    .item-removed {
      color: #9ca3af;
      text-decoration: line-through;
    }
    .item-list li.item-removed:before {
      color: #d1d5db;
      content: "\\2715";
    }
    .claimed-by {
      font-size: 12px;
      color: #6b7280;
      margin-left: 8px;
      font-style: italic;
    }
    .cta-button {
      display: inline-block;
      background-color: #069668;
      color: #ffffff;
      text-decoration: none;
      padding: 12px 24px;
      border-radius: 6px;
      font-weight: 600;
      font-size: 14px;
      margin: 24px 0;
    }
    .footer {
      background-color: #f9fafb;
      padding: 24px 32px;
      border-top: 1px solid #e5e7eb;
      text-align: center;
      font-size: 12px;
      color: #6b7280;
    }
    .footer a {
      color: #069668;
      text-decoration: none;
    }
    .footer p {
      margin: 0 0 8px 0;
    }
    .footer p:last-child {
      margin-bottom: 0;
    }
    @media (max-width: 600px) {
      .container {
        border-radius: 0;
      }
      .content {
        padding: 24px;
      }
      .header {
        padding: 32px 24px;
      }
      .header h1 {
        font-size: 24px;
      }
    }
  </style>
</head>
<body>
  <div class="container">
    <div class="header">
      <h1>{{ list_name }}</h1>
      <p>Your wishlist has been updated</p>
    </div>
    <div class="content">
      <div class="summary">
        <p><strong>{{ total }} change{{ "" if total == 1 else "s" }}</strong> in the last {{ window_minutes }} minutes</p>
      </div>
{% for section in sections %}
      <div class="section">
        <div class="section-title">
          <span class="section-icon">{{ section.icon }}</span>
          {{ section.title }} ({{ section.entries|length }})
        </div>
        <ul class="item-list">
{% for entry in section.entries %}
          <li{% if section.css_class %} class="{{ section.css_class }}"{% endif %}>{{ entry.item_name }}{% if section.show_claimer and entry.claimed_by %} <span class="claimed-by">by {{ entry.claimed_by }}</span>{% endif %}</li>
{% endfor %}
        </ul>
      </div>
{% endfor %}
      <div style="text-align: center;">
        <a href="{{ list_url }}" class="cta-button">View the full list</a>
      </div>
    </div>
    <div class="footer">
      <p>You're receiving this email because you subscribed to updates for this wishlist.</p>
      <p><a href="{{ unsubscribe_url }}">Unsubscribe from these notifications</a></p>
    </div>
  </div>
</body>
</html>
""")

# Display order of the digest sections: (partition, title, icon, css class).
SECTIONS = (
    ("item_added", "New items", "📝", None),
    ("item_claimed", "Items claimed", "✅", "item-claimed"),
    ("item_unclaimed", "Items unclaimed", "↩️", None),
    ("item_removed", "Removed items", "🗑️", "item-removed"),
)


def digest_subject(list_name: str) -> str:
    return f"[{list_name}] Updates on your wishlist"


def render_digest(
    list_name: str,
    summary: DigestSummary,
    list_url: str,
    unsubscribe_url: str,
    window_minutes: int = 30,
) -> str:
    sections = []
    for attr, title, icon, css_class in SECTIONS:
        entries = getattr(summary, attr)
        if not entries:
            continue
        sections.append(
            {
                "title": title,
                "icon": icon,
                "css_class": css_class,
                "entries": entries,
                "show_claimer": attr == "item_claimed",
            }
        )
    return DIGEST_HTML.render(
        list_name=list_name,
        total=summary.total_changes,
        window_minutes=window_minutes,
        sections=sections,
        list_url=list_url,
        unsubscribe_url=unsubscribe_url,
    )


def render_verification(list_name: str, verify_url: str, ttl_hours: int = 24):
    subject = f"Verify your subscription to {list_name}"
    body = VERIFY_BODY.render(list_name=list_name, verify_url=verify_url, ttl_hours=ttl_hours)
    # ``body`` is already escaped markup.
    return subject, BASE_WRAPPER.render(body=Markup(body))
