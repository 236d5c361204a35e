"""In-page snippets run through ``BrowserSession.evaluate``.

Each snippet takes a single object argument so it maps directly onto
Playwright's ``page.evaluate(expression, arg)``.
"""

from typing import NamedTuple


class PageScript(NamedTuple):
    name: str
    source: str


_IS_VISIBLE = """
  const isVisible = (el) => {
    if (el.classList && el.classList.contains('visible')) return true;
    if (el.style && el.style.display === 'none') return false;
    const style = window.getComputedStyle(el);
    if (style.display === 'none' || style.visibility === 'hidden') return false;
    const rect = el.getBoundingClientRect();
    return rect.width > 0 && rect.height > 0;
  };
"""

CLEAR_FIELD = PageScript(
    "clear_field",
    """
    ({ selector }) => {
      const el = document.querySelector(selector);
      if (!el) return false;
      el.value = '';
      el.dispatchEvent(new Event('focus'));
      return true;
    }
    """,
)

# Date widgets on the booking form ignore synthetic keystrokes; setting the
# value and firing change is what their listeners react to.
ASSIGN_VALUE = PageScript(
    "assign_value",
    """
    ({ selector, value }) => {
      const el = document.querySelector(selector);
      if (!el) return false;
      el.removeAttribute('disabled');
      el.value = value;
      el.dispatchEvent(new Event('change', { bubbles: true }));
      return true;
    }
    """,
)

IS_INTERACTABLE = PageScript(
    "is_interactable",
    """
    ({ selector, allow_disabled }) => {
      %s
      const el = document.querySelector(selector);
      if (!el) return false;
      if (el.disabled && !allow_disabled) return false;
      // Options never have a layout box of their own.
      if ((el.tagName || '').toLowerCase() === 'option') return true;
      return isVisible(el);
    }
    """
    % _IS_VISIBLE,
)

CHECK_BOX = PageScript(
    "check_box",
    """
    ({ selector }) => {
      const cb = document.querySelector(selector);
      if (!cb) return null;
      if (!cb.checked) cb.click();
      return !!cb.checked;
    }
    """,
)

CLICK_ELEMENT = PageScript(
    "click_element",
    """
    ({ selector }) => {
      const el = document.querySelector(selector);
      if (!el) return false;
      el.click();
      return true;
    }
    """,
)

IS_VISIBLE = PageScript(
    "is_visible",
    """
    ({ selector }) => {
      %s
      const el = document.querySelector(selector);
      return !!el && isVisible(el);
    }
    """
    % _IS_VISIBLE,
)

FIRST_VISIBLE_TEXT = PageScript(
    "first_visible_text",
    """
    ({ selector }) => {
      %s
      for (const el of document.querySelectorAll(selector)) {
        if (!isVisible(el)) continue;
        const text = (el.innerText || el.textContent || '').trim();
        if (text) return text;
      }
      return null;
    }
    """
    % _IS_VISIBLE,
)
