"""Selection model for the piano roll.

The editor owns the selected ids; every change is published to the note
store with `set_selection` so other views can follow it.
"""

from ..state import NO_MODIFIERS


class SelectionModel:
    """Ordered set of selected note ids."""

    def __init__(self, store):
        self.store = store
        self._ids: dict = {}  # insertion-ordered set
        for nid in store.get_selection():
            self._ids[nid] = None

    @property
    def ids(self) -> list:
        return list(self._ids)

    def __contains__(self, note_id):
        return note_id in self._ids

    def __len__(self):
        return len(self._ids)

    def __iter__(self):
        return iter(list(self._ids))

    def _publish(self, ids):
        ids = list(dict.fromkeys(ids))
        if ids == list(self._ids):
            return
        self._ids = dict.fromkeys(ids)
        self.store.set_selection(ids)

    def click(self, note_id, modifiers=NO_MODIFIERS):
        """Apply a click on a note.

        Plain click selects exactly that note, unless it is already part
        of a selection (the caller may then drag the whole group and
        collapse it on release). Additive toggles, range adds.

        Returns True when the note ended up selected.
        """
        if modifiers.additive:
            if note_id in self._ids:
                self._publish(i for i in self._ids if i != note_id)
                return False
            self._publish(self.ids + [note_id])
            return True
        if modifiers.range:
            if note_id not in self._ids:
                self._publish(self.ids + [note_id])
            return True
        if note_id not in self._ids:
            self._publish([note_id])
        return True

    def replace(self, ids):
        self._publish(ids)

    def union(self, ids):
        self._publish(self.ids + list(ids))

    def clear(self):
        self._publish([])

    def select_all(self):
        self._publish(n.id for n in self.store.notes())

    def prune(self):
        """Drop ids the store no longer knows about."""
        alive = {n.id for n in self.store.notes()}
        self._publish(i for i in self._ids if i in alive)

    def selected_notes(self):
        """Selected Note objects, in store order."""
        return [n for n in self.store.notes() if n.id in self._ids]
