import pytest

from venuebook.domain.widget.embed import build_embed_code


def test_minimal_snippet():
    code = build_embed_code("abc123", api_url="https://api.example.com/")

    assert '<div id="venuebook-widget"></div>' in code
    assert 'src="https://api.example.com/widget.js"' in code
    assert 'data-api-key="abc123"' in code
    assert "data-color" not in code


def test_options_become_data_attributes():
    code = build_embed_code(
        "abc123",
        {"primaryColor": "#112233", "layout": "modal", "darkMode": False, "borderRadius": "", "fontFamily": None},
        api_url="https://api.example.com",
    )

    assert 'data-color="#112233"' in code
    assert 'data-layout="modal"' in code
    assert 'data-dark-mode="false"' in code
    assert "data-border-radius" not in code
    assert "data-font-family" not in code


def test_values_are_escaped():
    code = build_embed_code("abc123", {"headerText": '"><script>alert(1)</script>'}, api_url="https://api.example.com")

    assert "<script>alert" not in code
    assert 'data-header-text="&quot;&gt;&lt;script&gt;alert(1)&lt;/script&gt;"' in code


def test_features_sorted_and_kebab_cased():
    code = build_embed_code(
        "abc123",
        {"features": {"showReviews": 1, "onlinePayment": True, "staff_selection": False}},
        api_url="https://api.example.com",
    )

    online = code.index('data-online-payment="true"')
    reviews = code.index('data-show-reviews="true"')
    staff = code.index('data-staff-selection="false"')
    assert online < reviews < staff


def test_invalid_calendar_style():
    with pytest.raises(ValueError):
        build_embed_code("abc123", {"calendarStyle": "huge"})

    assert 'data-calendar-style="compact"' in build_embed_code("abc123", {"calendarStyle": "compact"})


def test_features_cannot_shadow_reserved_attributes():
    code = build_embed_code(
        "abc123",
        {"primaryColor": "#112233", "features": {"apiKey": True, "color": False, "show_reviews": True, "showReviews": False}},
        api_url="https://api.example.com",
    )

    assert code.count("data-api-key=") == 1
    assert 'data-api-key="abc123"' in code
    assert code.count("data-color=") == 1
    assert 'data-color="#112233"' in code
    assert code.count("data-show-reviews=") == 1
