"""Document parsing entry point.

``parse_document`` is the only public way in: raw text plus the file's
vault-relative path go in, a :class:`ParsedDocument` comes out. It reads
no files and keeps no state between calls, so documents can be parsed
on independent threads.

Pipeline: frontmatter -> structural scan -> hierarchy -> binding.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from ravenmd.domain.binder import ObjectLocator, bind_refs, bind_traits
from ravenmd.domain.errors import ParseError
from ravenmd.domain.frontmatter import Frontmatter, split_frontmatter
from ravenmd.domain.hierarchy import build_objects
from ravenmd.domain.ids import file_id_from_path, normalize_relative_path
from ravenmd.domain.links import WikiLink, find_wikilinks
from ravenmd.domain.markdown import BodyScan, scan_body
from ravenmd.domain.models import (
    ParsedDocument,
    ParsedObject,
    ParsedRef,
    ParsedTrait,
    ParseOptions,
)
from ravenmd.domain.tags import find_tags
from ravenmd.domain.traits import TraitAnnotation, parse_trait_annotations

__all__ = [
    "ParseOptions",
    "ParsedDocument",
    "ParsedObject",
    "ParsedRef",
    "ParsedTrait",
    "parse_document",
]


def parse_document(
    content: str,
    path: str,
    *,
    options: ParseOptions | None = None,
) -> ParsedDocument:
    """Parse one document.

    Args:
        content: Full file text. ``\\r\\n`` line endings are accepted.
        path: Vault-relative file path; minus its extension it becomes
            the root object id.
        options: Parser options (defaults apply when omitted).

    Raises:
        ParseError: Tagged with *path*, on malformed frontmatter, a
            malformed ``::`` line, or a duplicate declared id.
    """
    relative_path = normalize_relative_path(path)
    try:
        return _parse(content, relative_path, options or ParseOptions())
    except ParseError as exc:
        raise exc.with_path(relative_path) from exc


def _parse(content: str, relative_path: str, options: ParseOptions) -> ParsedDocument:
    content = content.replace("\r\n", "\n")
    file_id = file_id_from_path(
        relative_path,
        objects_root=options.objects_root,
        pages_root=options.pages_root,
    )

    split = split_frontmatter(content)
    scan = scan_body(split.body, split.body_start_line)
    inline = _scan_inline(scan)

    objects = build_objects(
        file_id,
        split.frontmatter,
        scan,
        inline.tag_lines,
        options=options,
    )
    locator = ObjectLocator(objects)

    refs = bind_refs(_frontmatter_links(split.frontmatter), locator, source_id=locator.root_id)
    refs.extend(bind_refs(inline.links, locator))

    return ParsedDocument(
        file_path=relative_path,
        objects=objects,
        traits=bind_traits(inline.traits, locator),
        refs=refs,
    )


# ---------------------------------------------------------------------------
# Line scanning
# ---------------------------------------------------------------------------


@dataclass
class _InlineScan:
    traits: list[TraitAnnotation] = field(default_factory=list)
    links: list[WikiLink] = field(default_factory=list)
    tag_lines: dict[int, list[str]] = field(default_factory=dict)


def _scan_inline(scan: BodyScan) -> _InlineScan:
    """Collect traits, wikilinks and tags from non-code body lines.

    Array-wrapped links (``[[[a]], [[b]]]``) are kept on declaration lines
    and inside trait argument lists, where they are array values; in
    prose they are ignored.
    """
    result = _InlineScan()
    for line in scan.lines:
        links = find_wikilinks(line.text, line.number)
        tags = find_tags(line.text)
        if tags:
            result.tag_lines[line.number] = tags

        if line.number in scan.declarations:
            result.links.extend(links)
            continue

        # Content is the raw remainder so inline code in it survives.
        annotations = [
            replace(annotation, content=line.raw[annotation.end :].strip())
            for annotation in parse_trait_annotations(line.text, line.number)
        ]
        result.traits.extend(annotations)
        result.links.extend(
            link
            for link in links
            if not link.nested or any(a.covers(link.start) for a in annotations)
        )
    return result


def _frontmatter_links(frontmatter: Frontmatter | None) -> list[WikiLink]:
    if frontmatter is None or not frontmatter.raw:
        return []
    links: list[WikiLink] = []
    for offset, line in enumerate(frontmatter.raw.split("\n")):
        links.extend(find_wikilinks(line, frontmatter.raw_start_line + offset))
    return links
