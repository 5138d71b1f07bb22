"""DOM evaluation for pages that need a headless browser.

Social selectors track the current markup of third-party sites and break
when that markup changes.
"""

from typing import Any, Dict, List

from playwright.async_api import Page

from mealman.app.services.media.webpage import MAIN_CONTENT_SELECTORS

WEBPAGE_SCRIPT = """
(selectors) => {
  const meta = document.querySelector('meta[name="description"]');
  const jsonLd = Array.from(
    document.querySelectorAll('script[type="application/ld+json"]')
  ).map((s) => s.textContent || '');
  let main = '';
  for (const sel of selectors) {
    const node = document.querySelector(sel);
    if (node) { main = node.outerHTML; break; }
  }
  return {
    title: document.title || '',
    metaDescription: meta ? meta.getAttribute('content') || '' : '',
    jsonLd,
    mainContent: main,
    body: document.body ? document.body.innerText : '',
  };
}
"""

INSTAGRAM_SCRIPT = """
() => {
  const caption =
    document.querySelector('div[class*="caption"]')?.textContent ||
    document.querySelector('h1')?.textContent || '';
  const username =
    document.querySelector('a[class*="header"]')?.textContent ||
    document.querySelector('header a')?.textContent || '';
  const image =
    document.querySelector('img[class*="image"]')?.src ||
    document.querySelector('meta[property="og:image"]')?.content || '';
  return { caption, username, image };
}
"""

TWITTER_SCRIPT = """
() => {
  const text = document.querySelector('div[data-testid="tweetText"]')?.textContent || '';
  const username = document.querySelector('div[data-testid="User-Name"]')?.textContent || '';
  const images = Array.from(document.querySelectorAll('img[src*="media"]'))
    .map((img) => img.src)
    .filter(Boolean);
  return { text, username, images };
}
"""


async def evaluate_webpage(page: Page) -> Dict[str, Any]:
    return await page.evaluate(WEBPAGE_SCRIPT, MAIN_CONTENT_SELECTORS)


async def evaluate_instagram(page: Page) -> Dict[str, Any]:
    return await page.evaluate(INSTAGRAM_SCRIPT)


async def evaluate_twitter(page: Page) -> Dict[str, Any]:
    data = await page.evaluate(TWITTER_SCRIPT)
    images: List[str] = [src for src in data.get("images") or [] if isinstance(src, str)]
    # The same media URL shows up once per rendered size.
    data["images"] = list(dict.fromkeys(images))
    return data
