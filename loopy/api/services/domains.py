"""Domain registration, path groups, ownership verification and deletion."""

import logging
import re
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone

from loopy.api.config import config
from loopy.api.models.domain import Domain
from loopy.api.services import repo
from loopy.api.services.errors import ConflictError, NotFoundError, ValidationError
from loopy.api.services.url_utils import is_valid_hostname, normalize_hostname, root_hostname
from loopy.api.services.verification import (
    METHOD_FILE,
    METHOD_TXT,
    VerificationResult,
    check_txt,
    check_well_known,
    well_known_url,
)

logger = logging.getLogger(__name__)

DELETE_CONFIRMATION = "delete this domain"
GROUP_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9-]+$")
VERIFY_METHODS = {"txt": METHOD_TXT, "file": METHOD_FILE}


@dataclass
class DomainTree:
    """A root domain with the groups registered under it."""

    root: Domain
    groups: list[Domain] = field(default_factory=list)


def new_verification_token() -> str:
    """Challenge token: prefix + 8 random bytes as hex (16 chars)."""
    return f"{config.VERIFICATION_TOKEN_PREFIX}{secrets.token_hex(8)}"


def verification_instructions(domain: Domain) -> dict[str, str]:
    """What the user has to publish to prove control of domain."""
    host = root_hostname(domain.domain)
    return {
        "txt_record_name": host,
        "txt_record_value": domain.txt_record_value or "",
        "well_known_url": well_known_url(host),
    }


def add_domain(user_id: str, domain: str) -> Domain:
    """Register a new root domain, unverified, with a fresh challenge token."""
    host = normalize_hostname(domain)
    if not is_valid_hostname(host):
        raise ValidationError("domain_invalid", f"Not a valid hostname: {domain!r}")
    if repo.get_domain_by_name(user_id, host) is not None:
        raise ConflictError("domain_exists", f"Domain {host!r} already registered")
    row = repo.insert_domain(
        user_id,
        domain=host,
        txt_record_value=new_verification_token(),
        is_primary=True,
    )
    logger.info("Domain added user=%s domain=%s id=%s", user_id, host, row.id)
    return row


def list_domain_trees(user_id: str) -> list[DomainTree]:
    """Root domains (oldest first) each with its groups nested."""
    rows = repo.list_domains(user_id)
    trees: dict[str, DomainTree] = {}
    for row in rows:
        if row.is_primary:
            trees[row.id] = DomainTree(root=row)
    for row in rows:
        if not row.is_primary and row.primary_domain_id in trees:
            trees[row.primary_domain_id].groups.append(row)
    return list(trees.values())


def get_domain(user_id: str, domain_id: str) -> Domain:
    row = repo.get_domain(user_id, domain_id)
    if row is None:
        raise NotFoundError("domain")
    return row


def create_group(user_id: str, primary_domain_id: str, group_name: str) -> Domain:
    """Create "<root>/<group_name>" under a primary domain. The group inherits the root's verification."""
    name = (group_name or "").strip()
    if not name:
        raise ValidationError("group_name_required", "Please enter a group name")
    if not GROUP_NAME_PATTERN.match(name):
        raise ValidationError("group_name_invalid", "Group name can only contain letters, numbers, and hyphens")
    root = get_domain(user_id, primary_domain_id)
    if not root.is_primary:
        raise ValidationError("not_primary", "Groups can only be created under a primary domain")
    full = f"{root.domain}/{name}"
    if repo.get_domain_by_name(user_id, full) is not None:
        raise ConflictError("domain_exists", f"Group {full!r} already exists")
    row = repo.insert_domain(
        user_id,
        domain=full,
        txt_record_value=root.txt_record_value,
        is_primary=False,
        primary_domain_id=root.id,
        verified=root.verified,
        verified_at=root.verified_at,
        verification_method=root.verification_method,
    )
    logger.info("Group created user=%s group=%s root=%s", user_id, full, root.id)
    return row


def _verification_root(user_id: str, domain_id: str) -> Domain:
    """Groups are verified through their root domain."""
    row = get_domain(user_id, domain_id)
    if row.is_primary or not row.primary_domain_id:
        return row
    return get_domain(user_id, row.primary_domain_id)


def _record_success(user_id: str, root: Domain, result: VerificationResult) -> VerificationResult:
    repo.mark_domain_verified(
        user_id,
        root.id,
        method=result.method or METHOD_TXT,
        verified_at=datetime.now(timezone.utc),
    )
    logger.info("Domain verified user=%s domain=%s method=%s", user_id, root.domain, result.method)
    return result


def verify_domain_txt(user_id: str, domain_id: str) -> VerificationResult:
    """Verify via DNS TXT: success iff a record equals the stored token exactly."""
    root = _verification_root(user_id, domain_id)
    result = check_txt(root_hostname(root.domain), root.txt_record_value or "")
    if result.success:
        return _record_success(user_id, root, result)
    return result


def verify_domain_well_known(user_id: str, domain_id: str) -> VerificationResult:
    """Verify via https://<domain>/.well-known/loopy-verification.txt (trimmed body equals token)."""
    root = _verification_root(user_id, domain_id)
    result = check_well_known(root_hostname(root.domain), root.txt_record_value or "")
    if result.success:
        return _record_success(user_id, root, result)
    return result


def verify_domain(user_id: str, domain_id: str, method: str) -> VerificationResult:
    """Dispatch on method ('txt' or 'file')."""
    key = (method or "").strip().lower()
    if key not in VERIFY_METHODS:
        raise ValidationError("method_invalid", "method must be 'txt' or 'file'")
    if VERIFY_METHODS[key] == METHOD_TXT:
        return verify_domain_txt(user_id, domain_id)
    return verify_domain_well_known(user_id, domain_id)


def delete_domain(user_id: str, domain_id: str, confirmation: str) -> None:
    """Delete a domain once the user typed the confirmation and nothing depends on it."""
    if confirmation != DELETE_CONFIRMATION:
        raise ValidationError("confirmation_mismatch", "Please type the confirmation text exactly")
    get_domain(user_id, domain_id)
    if repo.count_links_for_domain(user_id, domain_id) > 0:
        raise ConflictError("domain_has_links", "Cannot delete domain with existing links")
    if repo.count_groups_for_domain(user_id, domain_id) > 0:
        raise ConflictError("domain_has_groups", "Cannot delete domain with existing groups")
    if not repo.delete_domain(user_id, domain_id):
        raise NotFoundError("domain")
    logger.info("Domain deleted user=%s id=%s", user_id, domain_id)
