"""Domain ownership checks: DNS TXT record and well-known file. Single attempt each, no retries."""

import logging
from dataclasses import dataclass

import dns.exception
import dns.resolver
import requests

from loopy.api.config import config

logger = logging.getLogger(__name__)

USER_AGENT = "LoopyLink-Verifier/1.0"

METHOD_TXT = "TXT"
METHOD_FILE = "FILE"

REASON_DNS_FAILED = "DNS lookup failed"
REASON_TXT_MISSING = "TXT value not found"
REASON_FILE_MISSING = "File not found or inaccessible"
REASON_FILE_MISMATCH = "File content does not match"
REASON_FILE_ERROR = "Failed to access verification file"


@dataclass(frozen=True)
class VerificationResult:
    success: bool
    reason: str | None = None
    method: str | None = None


def well_known_url(hostname: str) -> str:
    return f"https://{hostname}{config.VERIFICATION_FILE_PATH}"


def fetch_txt_records(hostname: str) -> list[str]:
    """Resolve TXT records for hostname. Multi-string records are joined (RFC 7208 style).
    Raises dns.exception.DNSException on NXDOMAIN, no answer, or timeout."""
    answer = dns.resolver.resolve(hostname, "TXT")
    records: list[str] = []
    for rdata in answer:
        records.append(b"".join(rdata.strings).decode("utf-8", errors="replace"))
    return records


def txt_matches(records: list[str], token: str) -> bool:
    """Exact match against any (stripped) record. Substrings and supersets do not count."""
    if not token:
        return False
    return any(r.strip() == token for r in records)


def body_matches(body: str, token: str) -> bool:
    if not token:
        return False
    return body.strip() == token


def check_txt(hostname: str, token: str) -> VerificationResult:
    """Look for token among the TXT records of hostname."""
    try:
        records = fetch_txt_records(hostname)
    except dns.exception.DNSException as e:
        logger.warning("DNS TXT lookup failed host=%s error=%s", hostname, e.__class__.__name__)
        return VerificationResult(success=False, reason=REASON_DNS_FAILED)
    if txt_matches(records, token):
        return VerificationResult(success=True, method=METHOD_TXT)
    logger.info("TXT token not found host=%s records=%d", hostname, len(records))
    return VerificationResult(success=False, reason=REASON_TXT_MISSING)


def check_well_known(hostname: str, token: str) -> VerificationResult:
    """Fetch https://<hostname>/.well-known/loopy-verification.txt and compare its trimmed body."""
    url = well_known_url(hostname)
    try:
        resp = requests.get(
            url,
            timeout=config.HTTP_TIMEOUT,
            headers={"User-Agent": USER_AGENT},
            allow_redirects=True,
        )
    except requests.RequestException as e:
        logger.warning("Well-known fetch failed url=%s error=%s", url, e.__class__.__name__)
        return VerificationResult(success=False, reason=REASON_FILE_ERROR)
    if not 200 <= resp.status_code < 300:
        logger.info("Well-known file missing url=%s status=%s", url, resp.status_code)
        return VerificationResult(success=False, reason=REASON_FILE_MISSING)
    if body_matches(resp.text, token):
        return VerificationResult(success=True, method=METHOD_FILE)
    return VerificationResult(success=False, reason=REASON_FILE_MISMATCH)
