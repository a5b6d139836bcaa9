"""
JXA programs for OmniOutliner.

Every program is built by build_script(): tool parameters are handed to the
script as a single JSON literal bound to `params`, so no value is ever spliced
into JavaScript source text.
"""

import json
import textwrap
from typing import Any

# Documents at or above this row count are returned top-level only unless a
# depth is requested explicitly.
LARGE_DOC_THRESHOLD = 500

_APP_CHECK = r"""
if (!app.running()) {
    return JSON.stringify({ error: { code: 'app_not_running', message: 'OmniOutliner is not running.', suggestion: 'Please open OmniOutliner to use this feature.' } });
}
"""

_HELPERS = r"""
function findDocument(app, documentName) {
    const docs = app.documents();
    if (docs.length === 0) {
        throw { code: 'no_document', message: 'No document is open in OmniOutliner.', suggestion: 'Please open a document in OmniOutliner.' };
    }
    if (documentName === null || documentName === undefined) {
        return { doc: docs[0], index: 0 };
    }
    for (let i = 0; i < docs.length; i++) {
        if (docs[i].name() === documentName) {
            return { doc: docs[i], index: i };
        }
    }
    const available = docs.map(d => d.name()).join(', ');
    throw { code: 'document_not_found', message: "Document '" + documentName + "' not found. Open documents: " + available };
}

function findRowIndex(allRows, rowId) {
    for (let i = 0; i < allRows.length; i++) {
        if (allRows[i].id() === rowId) {
            return i;
        }
    }
    return -1;
}

function rowNotFound(rowId) {
    return {
        code: 'row_not_found',
        message: "The row '" + rowId + "' could not be found.",
        suggestion: 'The row may have been deleted or moved. Try refreshing the outline.'
    };
}

function describeRow(row, level) {
    return {
        id: row.id(),
        topic: row.topic(),
        note: row.note() || null,
        level: level === undefined ? row.level() : level,
        state: row.state() || 'none'
    };
}

function filePathOf(doc) {
    try {
        const f = doc.file();
        return f ? f.toString() : null;
    } catch (e) {
        return null;
    }
}
"""


def _indent(source: str, level: int) -> str:
    return textwrap.indent(textwrap.dedent(source).strip("\n"), "    " * level)


def build_script(body: str, action: str, require_running: bool = True, **params: Any) -> str:
    """
    Wrap a script body into a complete JXA program.

    Args:
        body: JavaScript statements that return JSON.stringify(...).
        action: Used in the fallback error message ("Failed to <action>").
        require_running: Fail with app_not_running instead of launching.
        **params: Values exposed to the body as the `params` object.
    """
    literal = json.dumps(params, ensure_ascii=True, sort_keys=True)
    failure = json.dumps(f"Failed to {action}: ")
    parts = [
        "function run() {",
        "    const app = Application('OmniOutliner');",
    ]
    if require_running:
        parts.append(_indent(_APP_CHECK, 1))
    parts += [
        f"    const params = {literal};",
        _indent(_HELPERS, 1),
        "    try {",
        _indent(body, 2),
        "    } catch (e) {",
        "        if (e && e.code) {",
        "            return JSON.stringify({ error: e });",
        "        }",
        "        return JSON.stringify({",
        "            error: {",
        "                code: 'operation_failed',",
        f"                message: {failure} + (e && e.message ? e.message : String(e)),",
        "                technicalDetail: String(e)",
        "            }",
        "        });",
        "    }",
        "}",
    ]
    return "\n".join(parts) + "\n"


# =============================================================================
# Query scripts
# =============================================================================

_LIST_DOCUMENTS = r"""
const docs = app.documents();
if (docs.length === 0) {
    return JSON.stringify({ documents: [], message: 'No documents are open in OmniOutliner.' });
}
const result = [];
for (let i = 0; i < docs.length; i++) {
    const doc = docs[i];
    result.push({
        name: doc.name(),
        index: i,
        filePath: filePathOf(doc),
        rowCount: doc.rows().length,
        modified: doc.modified(),
        isFrontmost: i === 0
    });
}
return JSON.stringify({ documents: result, totalOpen: result.length });
"""

_GET_ALL_DOCUMENTS_CONTENT = r"""
const docs = app.documents();
if (docs.length === 0) {
    return JSON.stringify({ documents: [], message: 'No documents are open in OmniOutliner.' });
}
const result = [];
for (let d = 0; d < docs.length; d++) {
    const doc = docs[d];
    const totalRowCount = doc.rows().length;
    const topLevelOnly = totalRowCount >= params.largeDocThreshold;
    const source = topLevelOnly ? doc.rows.whose({ level: 1 })() : doc.rows();
    const rows = [];
    for (let i = 0; i < source.length; i++) {
        const row = source[i];
        const rowData = {
            id: row.id(),
            topic: row.topic(),
            level: topLevelOnly ? 1 : row.level(),
            state: row.state() || 'none'
        };
        if (params.includeNotes) {
            rowData.note = row.note() || null;
        }
        rows.push(rowData);
    }
    result.push({
        name: doc.name(),
        index: d,
        filePath: filePathOf(doc),
        isFrontmost: d === 0,
        modified: doc.modified(),
        totalRowCount: totalRowCount,
        rowsReturned: rows.length,
        autoLimited: topLevelOnly,
        rows: rows
    });
}
return JSON.stringify({ documents: result, totalDocuments: result.length });
"""

_GET_CURRENT_DOCUMENT = r"""
const { doc } = findDocument(app, null);
return JSON.stringify({
    document: {
        name: doc.name(),
        isFrontmost: true,
        rowCount: doc.rows().length
    }
});
"""

_GET_OUTLINE_STRUCTURE = r"""
const { doc, index } = findDocument(app, params.documentName);
const totalRowCount = doc.rows().length;
const maxDepth = params.maxDepth;

if (maxDepth === null && totalRowCount >= params.largeDocThreshold) {
    // whose() filters inside OmniOutliner instead of one round trip per row
    const topRows = doc.rows.whose({ level: 1 })();
    const rows = [];
    for (let i = 0; i < topRows.length; i++) {
        const row = topRows[i];
        const rowData = { id: row.id(), topic: row.topic(), level: 1, state: row.state() || 'none' };
        if (params.includeNotes) {
            rowData.note = row.note() || null;
        }
        rows.push(rowData);
    }
    return JSON.stringify({
        document: {
            name: doc.name(),
            totalRowCount: totalRowCount,
            rowsReturned: rows.length,
            isFrontmost: index === 0,
            autoLimited: true,
            effectiveMaxDepth: 1,
            message: 'Large document (' + totalRowCount + ' rows). Showing top-level only for performance. Use get_section_content(rowId) to explore sections, which returns totalRowsInSection.'
        },
        rows: rows
    });
}

const allRows = doc.rows();
const rows = [];
const stack = [];
for (let i = 0; i < allRows.length; i++) {
    const row = allRows[i];
    const level = row.level();
    while (stack.length > 0 && rows[stack[stack.length - 1]].level >= level) {
        stack.pop();
    }
    for (let s = 0; s < stack.length; s++) {
        rows[stack[s]].descendantCount++;
    }
    if (maxDepth !== null && level > maxDepth) {
        continue;
    }
    const rowData = { id: row.id(), topic: row.topic(), level: level, state: row.state() || 'none', descendantCount: 0 };
    if (params.includeNotes) {
        rowData.note = row.note() || null;
    }
    rows.push(rowData);
    stack.push(rows.length - 1);
}
return JSON.stringify({
    document: {
        name: doc.name(),
        totalRowCount: totalRowCount,
        rowsReturned: rows.length,
        isFrontmost: index === 0
    },
    rows: rows
});
"""

_GET_ROW = r"""
const { doc } = findDocument(app, params.documentName);
const allRows = doc.rows();
const targetIndex = findRowIndex(allRows, params.rowId);
if (targetIndex === -1) {
    throw rowNotFound(params.rowId);
}
const targetRow = allRows[targetIndex];
const result = { row: describeRow(targetRow), documentName: doc.name() };

if (params.includeChildren) {
    const targetLevel = targetRow.level();
    const children = [];
    for (let i = targetIndex + 1; i < allRows.length; i++) {
        const level = allRows[i].level();
        if (level <= targetLevel) break;
        if (level === targetLevel + 1) {
            children.push(describeRow(allRows[i], level));
        }
    }
    result.children = children;
}
return JSON.stringify(result);
"""

_GET_ROW_CHILDREN = r"""
const { doc } = findDocument(app, params.documentName);
const allRows = doc.rows();
const children = [];

if (params.rowId === null) {
    for (let i = 0; i < allRows.length; i++) {
        if (allRows[i].level() === 1) {
            children.push(describeRow(allRows[i], 1));
        }
    }
} else {
    const parentIndex = findRowIndex(allRows, params.rowId);
    if (parentIndex === -1) {
        throw rowNotFound(params.rowId);
    }
    const parentLevel = allRows[parentIndex].level();
    for (let i = parentIndex + 1; i < allRows.length; i++) {
        const level = allRows[i].level();
        if (level <= parentLevel) break;
        if (level === parentLevel + 1) {
            children.push(describeRow(allRows[i], level));
        }
    }
}
return JSON.stringify({ parentId: params.rowId, documentName: doc.name(), children: children });
"""

_SEARCH_OUTLINE = r"""
const { doc } = findDocument(app, params.documentName);
const allRows = doc.rows();
const query = params.query;
const needle = params.caseSensitive ? query : query.toLowerCase();
const maxResults = Math.min(params.maxResults, 100);
const results = [];

function context(text, idx) {
    const start = Math.max(0, idx - 20);
    const end = Math.min(text.length, idx + query.length + 20);
    return text.substring(start, end);
}

for (let i = 0; i < allRows.length && results.length < maxResults; i++) {
    const row = allRows[i];
    const topic = row.topic() || '';
    const note = row.note() || '';
    const haystackTopic = params.caseSensitive ? topic : topic.toLowerCase();
    const haystackNote = params.caseSensitive ? note : note.toLowerCase();

    if ((params.searchIn === 'all' || params.searchIn === 'topics') && haystackTopic.includes(needle)) {
        results.push({ row: describeRow(row), matchContext: context(topic, haystackTopic.indexOf(needle)), matchField: 'topic' });
    } else if ((params.searchIn === 'all' || params.searchIn === 'notes') && haystackNote.includes(needle)) {
        results.push({ row: describeRow(row), matchContext: context(note, haystackNote.indexOf(needle)), matchField: 'note' });
    }
}
return JSON.stringify({
    documentName: doc.name(),
    results: results,
    totalMatches: results.length,
    truncated: results.length >= maxResults
});
"""

CHECK_CONNECTION = r"""function run() {
    const app = Application('OmniOutliner');
    if (!app.running()) {
        return JSON.stringify({
            connected: false,
            appRunning: false,
            documentOpen: false,
            documentName: null,
            message: 'OmniOutliner is not running. Please launch OmniOutliner and open a document.'
        });
    }
    try {
        const docs = app.documents();
        if (docs.length === 0) {
            return JSON.stringify({
                connected: false,
                appRunning: true,
                documentOpen: false,
                documentName: null,
                message: 'OmniOutliner is running but no document is open. Please open a document.'
            });
        }
        const docName = docs[0].name();
        return JSON.stringify({
            connected: true,
            appRunning: true,
            documentOpen: true,
            documentName: docName,
            message: "Connected to OmniOutliner. Document '" + docName + "' is open."
        });
    } catch (e) {
        return JSON.stringify({
            connected: false,
            appRunning: true,
            documentOpen: false,
            documentName: null,
            message: 'Error checking OmniOutliner status: ' + e.message
        });
    }
}
"""


def list_documents() -> str:
    return build_script(_LIST_DOCUMENTS, "list documents")


def get_all_documents_content(include_notes: bool = True) -> str:
    return build_script(
        _GET_ALL_DOCUMENTS_CONTENT,
        "read documents",
        includeNotes=include_notes,
        largeDocThreshold=LARGE_DOC_THRESHOLD,
    )


def get_current_document() -> str:
    return build_script(_GET_CURRENT_DOCUMENT, "get current document")


def get_outline_structure(
    max_depth: int | None = None,
    include_notes: bool = True,
    document_name: str | None = None,
) -> str:
    return build_script(
        _GET_OUTLINE_STRUCTURE,
        "get outline",
        maxDepth=max_depth,
        includeNotes=include_notes,
        documentName=document_name,
        largeDocThreshold=LARGE_DOC_THRESHOLD,
    )


def get_row(row_id: str, include_children: bool = False, document_name: str | None = None) -> str:
    return build_script(
        _GET_ROW,
        "get row",
        rowId=row_id,
        includeChildren=include_children,
        documentName=document_name,
    )


def get_row_children(row_id: str | None = None, document_name: str | None = None) -> str:
    return build_script(
        _GET_ROW_CHILDREN,
        "get row children",
        rowId=row_id,
        documentName=document_name,
    )


def search_outline(
    query: str,
    search_in: str = "all",
    case_sensitive: bool = False,
    max_results: int = 50,
    document_name: str | None = None,
) -> str:
    return build_script(
        _SEARCH_OUTLINE,
        "search outline",
        query=query,
        searchIn=search_in,
        caseSensitive=case_sensitive,
        maxResults=max_results,
        documentName=document_name,
    )


# =============================================================================
# Modification scripts
# =============================================================================

_CREATE_DOCUMENT = r"""
if (!app.running()) {
    app.launch();
    delay(0.5);
}
app.activate();
const newDoc = app.make({ new: 'document' });
const docName = newDoc.name();
return JSON.stringify({
    success: true,
    message: "Created new document '" + docName + "'. The document is unsaved - use File > Save in OmniOutliner to save it.",
    document: { name: docName, rowCount: 0, isFrontmost: true }
});
"""

# Shared by add_row and move_row: resolve where a new row goes.
_PLACEMENT = r"""
function resolvePlacement(doc, allRows, parentId, siblingId) {
    if (siblingId !== null) {
        const siblingIndex = findRowIndex(allRows, siblingId);
        if (siblingIndex === -1) {
            throw rowNotFound(siblingId);
        }
        return { sibling: allRows[siblingIndex], level: allRows[siblingIndex].level() };
    }
    if (parentId !== null) {
        const parentIndex = findRowIndex(allRows, parentId);
        if (parentIndex === -1) {
            throw rowNotFound(parentId);
        }
        return { target: allRows[parentIndex].rows, level: allRows[parentIndex].level() + 1 };
    }
    return { target: doc.rows, level: 1 };
}

function placeRow(placement, props, position, relativePosition) {
    if (placement.sibling) {
        const at = relativePosition === 'before' ? placement.sibling.before : placement.sibling.after;
        try {
            return app.make({ new: 'row', withProperties: props, at: at });
        } catch (e) {
            throw { code: 'invalid_location', message: 'Cannot place the row at the specified location.', suggestion: 'Choose a different parent row or position.', technicalDetail: String(e) };
        }
    }
    const newRow = app.Row(props);
    if (position === 'first') {
        placement.target.unshift(newRow);
    } else {
        placement.target.push(newRow);
    }
    return newRow;
}
"""

_ADD_ROW = _PLACEMENT + r"""
const { doc } = findDocument(app, params.documentName);
const allRows = doc.rows();
const placement = resolvePlacement(doc, allRows, params.parentId, params.siblingId);

const props = { topic: params.topic };
if (params.note) {
    props.note = params.note;
}
const newRow = placeRow(placement, props, params.position, params.relativePosition);

return JSON.stringify({
    success: true,
    documentName: doc.name(),
    message: "Added row '" + params.topic + "'" + (params.parentId ? ' under parent' : '') + " in '" + doc.name() + "'.",
    newRow: {
        id: newRow.id(),
        topic: newRow.topic(),
        note: newRow.note() || null,
        level: placement.level,
        state: newRow.state() || 'none',
        hasChildren: false,
        parentId: params.parentId,
        childIds: []
    },
    undoAvailable: true
});
"""

_UPDATE_ROW = r"""
const { doc } = findDocument(app, params.documentName);
const allRows = doc.rows();
const rowIndex = findRowIndex(allRows, params.rowId);
if (rowIndex === -1) {
    throw rowNotFound(params.rowId);
}
const row = allRows[rowIndex];
const changes = [];

if (params.topic !== null) {
    row.topic = params.topic;
    changes.push('topic');
}
if (params.note !== null) {
    // an empty string clears the note
    row.note = params.note === '' ? null : params.note;
    changes.push('note');
}
if (params.state !== null) {
    row.state = params.state;
    changes.push('state');
}

const childRows = row.rows();
const childIds = [];
for (let i = 0; i < childRows.length; i++) {
    childIds.push(childRows[i].id());
}
return JSON.stringify({
    success: true,
    documentName: doc.name(),
    message: 'Updated row in ' + doc.name() + ': changed ' + (changes.length ? changes.join(', ') : 'nothing') + '.',
    updatedRow: {
        id: row.id(),
        topic: row.topic(),
        note: row.note() || null,
        level: row.level(),
        state: row.state() || 'none',
        hasChildren: childRows.length > 0,
        childIds: childIds
    },
    undoAvailable: true
});
"""

# OmniOutliner's JXA dictionary cannot move rows, so the subtree is copied to
# the destination and the original deleted. The moved row gets a new id.
_MOVE_ROW = _PLACEMENT + r"""
const { doc } = findDocument(app, params.documentName);
const allRows = doc.rows();
const sourceIndex = findRowIndex(allRows, params.rowId);
if (sourceIndex === -1) {
    throw rowNotFound(params.rowId);
}
const sourceRow = allRows[sourceIndex];
const sourceLevel = sourceRow.level();

const anchorId = params.siblingId !== null ? params.siblingId : params.newParentId;
if (anchorId !== null) {
    for (let i = sourceIndex; i < allRows.length; i++) {
        if (i > sourceIndex && allRows[i].level() <= sourceLevel) break;
        if (allRows[i].id() === anchorId) {
            throw { code: 'invalid_location', message: 'Cannot move a row under itself or its descendants.', suggestion: 'Choose a different parent row or position.' };
        }
    }
}

function gatherRowData(rowIndex) {
    const row = allRows[rowIndex];
    const rowLevel = row.level();
    const data = { topic: row.topic(), note: row.note() || null, state: row.state() || 'none', children: [] };
    for (let i = rowIndex + 1; i < allRows.length; i++) {
        const level = allRows[i].level();
        if (level <= rowLevel) break;
        if (level === rowLevel + 1) {
            data.children.push(gatherRowData(i));
        }
    }
    return data;
}

function createChildren(items, target) {
    for (const item of items) {
        const props = { topic: item.topic };
        if (item.note) props.note = item.note;
        const child = app.Row(props);
        target.push(child);
        if (item.state && item.state !== 'none') child.state = item.state;
        createChildren(item.children, child.rows);
    }
}

const sourceData = gatherRowData(sourceIndex);
const placement = resolvePlacement(doc, allRows, params.newParentId, params.siblingId);
const props = { topic: sourceData.topic };
if (sourceData.note) props.note = sourceData.note;
const newRow = placeRow(placement, props, params.position, params.relativePosition);
if (sourceData.state !== 'none') newRow.state = sourceData.state;
createChildren(sourceData.children, newRow.rows);

app.delete(sourceRow);

const newChildRows = newRow.rows();
const childIds = [];
for (let i = 0; i < newChildRows.length; i++) {
    childIds.push(newChildRows[i].id());
}
return JSON.stringify({
    success: true,
    documentName: doc.name(),
    message: "Moved '" + sourceData.topic + "'" + (params.newParentId ? ' under new parent' : ' to top level') + " in '" + doc.name() + "'. Note: Row ID has changed.",
    movedRow: {
        id: newRow.id(),
        topic: newRow.topic(),
        note: newRow.note() || null,
        level: newRow.level(),
        state: newRow.state() || 'none',
        hasChildren: newChildRows.length > 0,
        parentId: params.newParentId,
        childIds: childIds
    },
    previousRowId: params.rowId,
    undoAvailable: true
});
"""

_DELETE_ROW = r"""
const { doc } = findDocument(app, params.documentName);
const allRows = doc.rows();
const rowIndex = findRowIndex(allRows, params.rowId);
if (rowIndex === -1) {
    throw rowNotFound(params.rowId);
}
const row = allRows[rowIndex];
const topic = row.topic();
const rowLevel = row.level();

const affectedRows = [{ id: row.id(), topic: topic }];
for (let i = rowIndex + 1; i < allRows.length; i++) {
    if (allRows[i].level() <= rowLevel) break;
    affectedRows.push({ id: allRows[i].id(), topic: allRows[i].topic() });
}
const childCount = affectedRows.length - 1;

if (!params.confirmed) {
    return JSON.stringify({
        success: false,
        documentName: doc.name(),
        requiresConfirmation: true,
        message: "This will delete '" + topic + "' and " + childCount + " child rows from '" + doc.name() + "'. Set confirmed=true to proceed.",
        affectedRows: affectedRows
    });
}

app.delete(row);
return JSON.stringify({
    success: true,
    documentName: doc.name(),
    message: "Deleted '" + topic + "' and " + childCount + " child rows from '" + doc.name() + "'.",
    deletedCount: childCount + 1,
    undoAvailable: true
});
"""


def create_document() -> str:
    return build_script(_CREATE_DOCUMENT, "create document", require_running=False)


def add_row(
    topic: str,
    note: str | None = None,
    parent_id: str | None = None,
    position: str = "last",
    sibling_id: str | None = None,
    relative_position: str | None = None,
    document_name: str | None = None,
) -> str:
    return build_script(
        _ADD_ROW,
        "add row",
        topic=topic,
        note=note,
        parentId=parent_id,
        position=position,
        siblingId=sibling_id,
        relativePosition=relative_position or "after",
        documentName=document_name,
    )


def update_row(
    row_id: str,
    topic: str | None = None,
    note: str | None = None,
    state: str | None = None,
    document_name: str | None = None,
) -> str:
    return build_script(
        _UPDATE_ROW,
        "update row",
        rowId=row_id,
        topic=topic,
        note=note,
        state=state,
        documentName=document_name,
    )


def move_row(
    row_id: str,
    new_parent_id: str | None = None,
    position: str = "last",
    sibling_id: str | None = None,
    relative_position: str | None = None,
    document_name: str | None = None,
) -> str:
    return build_script(
        _MOVE_ROW,
        "move row",
        rowId=row_id,
        newParentId=new_parent_id,
        position=position,
        siblingId=sibling_id,
        relativePosition=relative_position or "after",
        documentName=document_name,
    )


def delete_row(row_id: str, confirmed: bool, document_name: str | None = None) -> str:
    return build_script(
        _DELETE_ROW,
        "delete row",
        rowId=row_id,
        confirmed=confirmed,
        documentName=document_name,
    )


# =============================================================================
# Synthesis scripts
# =============================================================================

_GET_SECTION_CONTENT = r"""
const { doc } = findDocument(app, params.documentName);
const allRows = doc.rows();
const rowId = params.rowId;
const offset = params.offset;
const limit = params.limit;

let sectionTitle = doc.name();
let sectionId = null;
let startIndex = 0;
let baseLevel = 0;

if (rowId !== null) {
    const sectionIndex = findRowIndex(allRows, rowId);
    if (sectionIndex === -1) {
        throw rowNotFound(rowId);
    }
    sectionTitle = allRows[sectionIndex].topic();
    sectionId = allRows[sectionIndex].id();
    baseLevel = allRows[sectionIndex].level();
    startIndex = sectionIndex + 1;
}

// Rows outside the page window only have their level read.
const rows = [];
let rowsInSection = 0;
let prevLevel = baseLevel;
for (let i = startIndex; i < allRows.length; i++) {
    const row = allRows[i];
    const level = row.level();
    if (rowId !== null && level <= baseLevel) break;
    rowsInSection++;
    if (rowsInSection <= offset || rows.length >= limit) {
        continue;
    }
    const adjustedLevel = rowId !== null ? level - baseLevel : level;
    if (rows.length > 0 && adjustedLevel > prevLevel) {
        for (let k = rows.length - 1; k >= 0; k--) {
            if (rows[k].level === adjustedLevel - 1) {
                rows[k].hasChildren = true;
                break;
            }
        }
    }
    const rowData = describeRow(row, adjustedLevel);
    rowData.hasChildren = false;
    rows.push(rowData);
    prevLevel = adjustedLevel;
}

const pagination = {
    offset: offset,
    limit: limit,
    rowsReturned: rows.length,
    totalRowsInSection: rowsInSection,
    hasMore: (offset + rows.length) < rowsInSection
};
const section = {
    title: sectionTitle,
    id: sectionId,
    documentName: doc.name(),
    totalRowsInDocument: allRows.length
};
const pageNote = '\n... (page ' + Math.floor(offset / limit + 1) + ', showing rows ' + (offset + 1) + '-' + (offset + rows.length) + ' of ' + rowsInSection + ')\n';

if (params.format === 'markdown') {
    let md = '# ' + sectionTitle + '\n\n';
    for (const row of rows) {
        const indent = '  '.repeat(Math.max(0, row.level - 1));
        md += indent + '- ' + row.topic + '\n';
        if (row.note) {
            md += indent + '  > ' + row.note + '\n';
        }
    }
    if (pagination.hasMore) md += pageNote;
    return JSON.stringify({ section: section, pagination: pagination, markdown: md });
}
if (params.format === 'plain') {
    let text = sectionTitle + '\n';
    for (const row of rows) {
        const indent = '  '.repeat(row.level);
        text += indent + row.topic + '\n';
        if (row.note) {
            text += indent + '  [Note: ' + row.note + ']\n';
        }
    }
    if (pagination.hasMore) text += pageNote;
    return JSON.stringify({ section: section, pagination: pagination, text: text });
}
return JSON.stringify({ section: section, pagination: pagination, rows: rows });
"""

_INSERT_CONTENT = r"""
const { doc } = findDocument(app, params.documentName);
const allRows = doc.rows();

let targetRows = doc.rows;
if (params.parentId !== null) {
    const parentIndex = findRowIndex(allRows, params.parentId);
    if (parentIndex === -1) {
        throw rowNotFound(params.parentId);
    }
    targetRows = allRows[parentIndex].rows;
}

let content;
try {
    content = JSON.parse(params.content);
} catch (e) {
    content = [{ topic: params.content }];
}
if (!Array.isArray(content)) {
    content = [content];
}

function createRows(items, target, insertFirst) {
    const created = [];
    // unshift reverses order, so walk the items backwards when inserting first
    const ordered = insertFirst ? items.slice().reverse() : items;
    for (const item of ordered) {
        const text = typeof item === 'string' ? item : (item.topic || '');
        const props = { topic: text };
        if (item.note) {
            props.note = item.note;
        }
        const newRow = app.Row(props);
        if (insertFirst) {
            target.unshift(newRow);
        } else {
            target.push(newRow);
        }
        const entry = [{ id: newRow.id(), topic: newRow.topic(), note: newRow.note() || null }];
        if (item.children && item.children.length > 0) {
            entry.push(...createRows(item.children, newRow.rows, false));
        }
        created.push(entry);
    }
    if (insertFirst) created.reverse();
    return [].concat(...created);
}

const insertedRows = createRows(content, targetRows, params.position === 'first');
return JSON.stringify({
    success: true,
    documentName: doc.name(),
    message: 'Inserted ' + insertedRows.length + ' rows' + (params.parentId ? ' under parent' : '') + ' in ' + doc.name() + '.',
    insertedRows: insertedRows,
    undoAvailable: true
});
"""


def get_section_content(
    row_id: str | None = None,
    format: str = "structured",
    document_name: str | None = None,
    offset: int = 0,
    limit: int = 500,
) -> str:
    return build_script(
        _GET_SECTION_CONTENT,
        "get section content",
        rowId=row_id,
        format=format,
        documentName=document_name,
        offset=offset,
        limit=limit,
    )


def insert_content(
    content: str,
    parent_id: str | None = None,
    position: str = "last",
    document_name: str | None = None,
) -> str:
    return build_script(
        _INSERT_CONTENT,
        "insert content",
        content=content,
        parentId=parent_id,
        position=position,
        documentName=document_name,
    )
