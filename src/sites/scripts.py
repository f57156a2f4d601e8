"""
In-page JavaScript executed through BrowserTab.evaluate.

Selectors are passed in as arguments so the same scripts serve every site
configuration.
"""

# Raw listing candidates on a results page: [{registration, href}, ...]
DISCOVER_LISTINGS_JS = r"""
(sel) => {
  const out = [];
  const cards = Array.from(document.querySelectorAll(sel.container));
  const roots = cards.length ? cards : [document];
  for (const card of roots) {
    const links = card === document
      ? Array.from(document.querySelectorAll(sel.link))
      : [card.querySelector(sel.link)].filter(Boolean);
    for (const link of links) {
      const regEl = card === document ? null : card.querySelector(sel.registration);
      let registration = regEl ? (regEl.getAttribute('data-registration') || regEl.textContent || '') : '';
      registration = registration.replace(/\s+/g, ' ').trim().toUpperCase();
      out.push({
        registration: registration || null,
        href: link.getAttribute('href') || ''
      });
    }
  }
  return out;
}
"""

# Hydration is ready once the advert carries id, mileage and registration date
HYDRATION_READY_JS = r"""
() => {
  const ad = window.UVL && window.UVL.AD;
  if (!ad) return false;
  const mileage = ad.condition_and_state && ad.condition_and_state.mileage;
  const reg = ad.dates && ad.dates.registration;
  return !!(ad.advert_id && mileage !== undefined && mileage !== null && reg);
}
"""

# Structured clone of the payload; functions and DOM refs are dropped
READ_HYDRATION_JS = r"""
() => {
  const ad = window.UVL && window.UVL.AD;
  if (!ad) return null;
  try { return JSON.parse(JSON.stringify(ad)); } catch (e) { return null; }
}
"""

DISABLE_ANIMATIONS_JS = r"""
() => {
  const style = document.createElement('style');
  style.setAttribute('data-carwatch', 'no-motion');
  style.textContent = `*, *::before, *::after {
    transition: none !important;
    animation: none !important;
    scroll-behavior: auto !important;
  }`;
  (document.head || document.documentElement).appendChild(style);
  return true;
}
"""

# {present, disabled} for the "next page" control
PAGINATION_STATE_JS = r"""
(selector) => {
  const el = document.querySelector(selector);
  if (!el) return { present: false, disabled: true };
  const aria = (el.getAttribute('aria-disabled') || '').toLowerCase();
  const disabled = aria === 'true' || el.hasAttribute('disabled') || /disabled/i.test(el.className || '');
  return { present: true, disabled };
}
"""

ELEMENT_TEXT_JS = r"""
(selector) => {
  const el = document.querySelector(selector);
  return el ? (el.innerText || el.textContent || '') : null;
}
"""

CONTENT_LENGTH_JS = r"""
() => (document.documentElement ? document.documentElement.outerHTML.length : 0)
"""

SCROLL_LISTBOX_JS = r"""
() => {
  const menu = document.querySelector('[id$="-listbox"]');
  if (menu) menu.scrollTop = menu.scrollHeight;
  return !!menu;
}
"""

VARIANT_COMMITTED_JS = r"""
() => {
  const input = document.querySelector('input[name="variant"]');
  return !!(input && input.value && input.value.trim());
}
"""

MODEL_TEXT_VISIBLE_JS = r"""
(expected) => {
  const want = String(expected || '').toLowerCase();
  return Array.from(document.querySelectorAll('img.uvl-c-advert__media-image'))
    .some(img => (img.getAttribute('alt') || '').toLowerCase().includes(want));
}
"""
