"""
In-memory collections used when MEM_OR_EXTERNAL=MEM.

They implement the subset of the PyMongo collection API the service relies on
(insert_one, find_one, find_one_and_update, count_documents, aggregate
with $match/$sample/$project) so the same code paths run without MongoDB.

The contents of this file are property of Doorman Dev, LLC
Review the Apache License 2.0 for valid authorization of use
See https://github.com/apidoorman/doorman for more information
"""

import copy
import random
import threading

from bson import ObjectId


class InMemoryInsertResult:
    def __init__(self, inserted_id):
        self.acknowledged = True
        self.inserted_id = inserted_id


class InMemoryCursor:
    def __init__(self, docs):
        self._docs = [copy.deepcopy(d) for d in docs]

    def __iter__(self):
        return iter([copy.deepcopy(d) for d in self._docs])

    def to_list(self, length=None):
        data = [copy.deepcopy(d) for d in self._docs]
        if length is None:
            return data
        return data[: int(length)]


def _apply_projection(doc, projection):
    if not projection:
        return doc
    include = {k for k, v in projection.items() if v}
    if include:
        # _id is kept unless explicitly excluded
        if projection.get('_id', 1):
            include.add('_id')
        return {k: v for k, v in doc.items() if k in include}
    return {k: v for k, v in doc.items() if k not in projection}


class InMemoryCollection:
    def __init__(self, name):
        self.name = name
        self._docs = []
        self._lock = threading.RLock()

    def _match_value(self, actual, cond):
        if isinstance(cond, dict) and cond and all(str(k).startswith('$') for k in cond):
            for op, expected in cond.items():
                if op == '$ne':
                    if actual == expected:
                        return False
                elif op == '$nin':
                    if actual in expected:
                        return False
                else:
                    raise ValueError(f'Unsupported query operator: {op}')
            return True
        return actual == cond

    def _match(self, doc, query):
        if not query:
            return True
        for k, v in query.items():
            if not self._match_value(doc.get(k), v):
                return False
        return True

    def _apply_update(self, doc, update):
        updated = copy.deepcopy(doc)
        for k, v in (update.get('$set') or {}).items():
            updated[k] = v
        return updated

    def find_one(self, query=None, projection=None):
        with self._lock:
            for d in self._docs:
                if self._match(d, query or {}):
                    return _apply_projection(copy.deepcopy(d), projection)
            return None

    def insert_one(self, doc):
        with self._lock:
            new_doc = copy.deepcopy(doc)
            if '_id' not in new_doc:
                new_doc['_id'] = ObjectId()
            # pymongo mutates the caller's document the same way
            doc['_id'] = new_doc['_id']
            self._docs.append(new_doc)
            return InMemoryInsertResult(new_doc['_id'])

    def count_documents(self, query=None):
        with self._lock:
            return len([1 for d in self._docs if self._match(d, query or {})])

    def find_one_and_update(self, query, update, projection=None, return_document=False):
        """Match and update one document under the collection lock.

        ``return_document`` follows pymongo's ReturnDocument: truthy returns the
        updated document, falsy the original.
        """
        with self._lock:
            for i, d in enumerate(self._docs):
                if self._match(d, query):
                    updated = self._apply_update(d, update)
                    self._docs[i] = updated
                    result = updated if return_document else d
                    return _apply_projection(copy.deepcopy(result), projection)
            return None

    def aggregate(self, pipeline):
        with self._lock:
            docs = [copy.deepcopy(d) for d in self._docs]
        for stage in pipeline:
            (op, arg), = stage.items()
            if op == '$match':
                docs = [d for d in docs if self._match(d, arg)]
            elif op == '$sample':
                size = int(arg.get('size', 0))
                docs = random.sample(docs, min(size, len(docs)))
            elif op == '$project':
                docs = [_apply_projection(d, arg) for d in docs]
            else:
                raise ValueError(f'Unsupported aggregation stage: {op}')
        return InMemoryCursor(docs)


class AsyncInMemoryCollection:
    """Async wrapper around InMemoryCollection mirroring Motor's surface."""

    def __init__(self, sync_collection):
        self._sync = sync_collection
        self.name = sync_collection.name

    async def find_one(self, query=None, projection=None):
        return self._sync.find_one(query, projection)

    async def insert_one(self, doc):
        return self._sync.insert_one(doc)

    async def count_documents(self, query=None):
        return self._sync.count_documents(query)

    async def find_one_and_update(self, query, update, projection=None, return_document=False):
        return self._sync.find_one_and_update(query, update, projection, return_document)

    def aggregate(self, pipeline):
        return self._sync.aggregate(pipeline)


class InMemoryDB:
    def __init__(self, async_mode=True):
        self._async_mode = async_mode
        self._collections: dict[str, InMemoryCollection] = {}
        self._lock = threading.RLock()

    def _sync_collection(self, name):
        with self._lock:
            if name not in self._collections:
                self._collections[name] = InMemoryCollection(name)
            return self._collections[name]

    def get_collection(self, name):
        coll = self._sync_collection(name)
        return AsyncInMemoryCollection(coll) if self._async_mode else coll

    def dump_data(self) -> dict:
        with self._lock:
            return {name: copy.deepcopy(c._docs) for name, c in self._collections.items()}
