"""Device / OS / browser from a User-Agent string, for clicks whose caller did not classify them."""

from user_agents import parse


def device_type(user_agent: str) -> str:
    """Mobile, Tablet or Desktop. Bots and unknown agents count as Desktop."""
    ua = parse(user_agent)
    if ua.is_tablet:
        return "Tablet"
    if ua.is_mobile:
        return "Mobile"
    return "Desktop"


def parse_user_agent(user_agent: str | None) -> dict[str, str | None]:
    """Return {device, browser, os}; all None when there is no UA to parse."""
    if not user_agent or not user_agent.strip():
        return {"device": None, "browser": None, "os": None}
    ua = parse(user_agent)
    return {
        "device": device_type(user_agent),
        "browser": ua.browser.family if ua.browser.family and ua.browser.family != "Other" else None,
        "os": ua.os.family if ua.os.family and ua.os.family != "Other" else None,
    }


def fill_missing(record: dict) -> dict:
    """Fill device/browser/os from user_agent only where the caller left them empty."""
    if all(record.get(k) for k in ("device", "browser", "os")):
        return record
    parsed = parse_user_agent(record.get("user_agent"))
    out = dict(record)
    for key, value in parsed.items():
        if not out.get(key):
            out[key] = value
    return out
