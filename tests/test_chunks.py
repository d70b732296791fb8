import pytest

from shot_grabber.chunks import partition, process_chunk_size


class TestPartition:
    @pytest.mark.parametrize("length", [0, 1, 2, 5, 6, 7, 13])
    @pytest.mark.parametrize("size", [1, 2, 3, 5])
    def test_chunks_concatenate_back_to_input(self, length, size):
        items = [f"https://example.test/{i}" for i in range(length)]
        chunks = partition(items, size)

        assert [item for chunk in chunks for item in chunk] == items
        assert all(len(chunk) == size for chunk in chunks[:-1])
        assert all(0 < len(chunk) <= size for chunk in chunks)

    def test_empty_input_gives_no_chunks(self):
        assert partition([], 3) == []

    def test_last_chunk_may_be_shorter(self):
        assert partition(["a", "b", "c", "d", "e"], 2) == [["a", "b"], ["c", "d"], ["e"]]

    @pytest.mark.parametrize("size", [0, -1])
    def test_size_must_be_positive(self, size):
        with pytest.raises(ValueError):
            partition(["a"], size)

    def test_does_not_modify_input(self):
        items = ["a", "b", "c"]
        partition(items, 2)
        assert items == ["a", "b", "c"]


class TestProcessChunkSize:
    def test_ceil_split_gives_worker_count_chunks(self):
        urls = list(range(10))
        size = process_chunk_size(len(urls), worker_count=4, batch_size=1)

        assert size == 3
        assert len(partition(urls, size)) == 4

    def test_never_smaller_than_one_batch(self):
        assert process_chunk_size(6, worker_count=4, batch_size=5) == 5
        assert len(partition(list(range(6)), 5)) == 2

    def test_two_urls_two_workers_batch_of_one(self):
        assert process_chunk_size(2, worker_count=2, batch_size=1) == 1

    def test_worker_count_must_be_positive(self):
        with pytest.raises(ValueError):
            process_chunk_size(3, worker_count=0, batch_size=1)
