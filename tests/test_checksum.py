from minnet.checksum import InternetChecksum

HEADER_NO_CKSUM = bytes.fromhex("450000730000400040110000c0a80001c0a800c7")
HEADER_WITH_CKSUM = bytes.fromhex("45000073000040004011b861c0a80001c0a800c7")


def test_empty_checksum():
    assert InternetChecksum().value() == 0xFFFF


def test_known_header_checksum():
    check = InternetChecksum()
    check.add(HEADER_NO_CKSUM)
    assert check.value() == 0xB861


def test_data_including_checksum_sums_to_zero():
    check = InternetChecksum()
    check.add(HEADER_WITH_CKSUM)
    assert check.value() == 0


def test_odd_length_chunks_keep_alignment():
    whole = InternetChecksum()
    whole.add(HEADER_NO_CKSUM)
    split = InternetChecksum()
    split.add(HEADER_NO_CKSUM[:3])
    split.add(HEADER_NO_CKSUM[3:7])
    split.add(HEADER_NO_CKSUM[7:])
    assert split.value() == whole.value()


def test_add_all_matches_add():
    chunks = [b"abc", b"de", b"f"]
    joined = InternetChecksum()
    joined.add(b"".join(chunks))
    parts = InternetChecksum()
    parts.add_all(chunks)
    assert parts.value() == joined.value()


def test_initial_sum_is_included():
    seeded = InternetChecksum(0x1234)
    plain = InternetChecksum()
    plain.add(b"\x12\x34")
    assert seeded.value() == plain.value()