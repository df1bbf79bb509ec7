import collections.abc


class AttributeDict(collections.abc.MutableMapping):
    '''Mapping whose keys can also be read and written as attributes'''
    def __init__(self, dic):
        self.__dict__['_store'] = dic

    def __getitem__(self, key):
        return self._store[key]

    def __setitem__(self, key, val):
        self._store[key] = val

    def __delitem__(self, key):
        del self._store[key]

    def __iter__(self):
        return iter(self._store)

    def __len__(self):
        return len(self._store)

    def __getattr__(self, key):
        try:
            return self.__dict__['_store'][key]
        except KeyError:
            raise AttributeError(key)

    def __setattr__(self, key, val):
        self._store[key] = val
