import pytest

from spotcore.spotify_id import FileId, SpotifyAudioType, SpotifyId, SpotifyIdError

CONV_VALID = [
    (
        238762092608182713602505436543891614649,
        SpotifyAudioType.TRACK,
        "spotify:track:5sWHDYs0csV6RS48xBl0tH",
        "b39fe8081e1f4c54be38e8d6f9f12bb9",
        "5sWHDYs0csV6RS48xBl0tH",
        bytes([179, 159, 232, 8, 30, 31, 76, 84, 190, 56, 232, 214, 249, 241, 43, 185]),
    ),
    (
        204841891221366092811751085145916697048,
        SpotifyAudioType.TRACK,
        "spotify:track:4GNcXTGWmnZ3ySrqvol3o4",
        "9a1b1cfbc6f244569ae0356c77bbe9d8",
        "4GNcXTGWmnZ3ySrqvol3o4",
        bytes([154, 27, 28, 251, 198, 242, 68, 86, 154, 224, 53, 108, 119, 187, 233, 216]),
    ),
    (
        204841891221366092811751085145916697048,
        SpotifyAudioType.PODCAST,
        "spotify:episode:4GNcXTGWmnZ3ySrqvol3o4",
        "9a1b1cfbc6f244569ae0356c77bbe9d8",
        "4GNcXTGWmnZ3ySrqvol3o4",
        bytes([154, 27, 28, 251, 198, 242, 68, 86, 154, 224, 53, 108, 119, 187, 233, 216]),
    ),
    (
        204841891221366092811751085145916697048,
        SpotifyAudioType.NON_PLAYABLE,
        "spotify:unknown:4GNcXTGWmnZ3ySrqvol3o4",
        "9a1b1cfbc6f244569ae0356c77bbe9d8",
        "4GNcXTGWmnZ3ySrqvol3o4",
        bytes([154, 27, 28, 251, 198, 242, 68, 86, 154, 224, 53, 108, 119, 187, 233, 216]),
    ),
]

CONV_INVALID = [
    (
        "spotify:arbitrarywhatever:5sWHDYs0Bl0tH",
        "ZZZZZ8081e1f4c54be38e8d6f9f12bb9",
        "!!!!!Ys0csV6RS48xBl0tH",
        bytes([154, 27, 28, 251, 198, 242, 68, 86, 154, 224, 5, 3, 108, 119, 187, 233, 216, 255]),
    ),
    (
        "spotify:arbitrarywhatever5sWHDYs0csV6RS48xBl0tH",
        "--------------------",
        "....................",
        bytes([154, 27, 28, 251]),
    ),
    (
        "spotify:azb:aRS48xBl0tH",
        "--------------------",
        "....................",
        bytes([154, 27, 28, 251]),
    ),
]


@pytest.mark.parametrize("num, kind, uri, base16, base62, raw", CONV_VALID)
def test_from_base62(num, kind, uri, base16, base62, raw):
    assert SpotifyId.from_base62(base62).id == num


@pytest.mark.parametrize("uri, base16, base62, raw", CONV_INVALID)
def test_from_base62_invalid(uri, base16, base62, raw):
    with pytest.raises(SpotifyIdError):
        SpotifyId.from_base62(base62)


@pytest.mark.parametrize("num, kind, uri, base16, base62, raw", CONV_VALID)
def test_to_base62(num, kind, uri, base16, base62, raw):
    assert SpotifyId(num, kind).to_base62() == base62


@pytest.mark.parametrize("num, kind, uri, base16, base62, raw", CONV_VALID)
def test_from_base16(num, kind, uri, base16, base62, raw):
    assert SpotifyId.from_base16(base16).id == num


@pytest.mark.parametrize("uri, base16, base62, raw", CONV_INVALID)
def test_from_base16_invalid(uri, base16, base62, raw):
    with pytest.raises(SpotifyIdError):
        SpotifyId.from_base16(base16)


@pytest.mark.parametrize("num, kind, uri, base16, base62, raw", CONV_VALID)
def test_to_base16(num, kind, uri, base16, base62, raw):
    assert SpotifyId(num, kind).to_base16() == base16


@pytest.mark.parametrize("num, kind, uri, base16, base62, raw", CONV_VALID)
def test_from_uri(num, kind, uri, base16, base62, raw):
    actual = SpotifyId.from_uri(uri)
    assert actual.id == num
    assert actual.audio_type == kind


@pytest.mark.parametrize("uri, base16, base62, raw", CONV_INVALID)
def test_from_uri_invalid(uri, base16, base62, raw):
    with pytest.raises(SpotifyIdError):
        SpotifyId.from_uri(uri)


def test_from_uri_requires_prefix():
    with pytest.raises(SpotifyIdError):
        SpotifyId.from_uri("track:5sWHDYs0csV6RS48xBl0tH")


@pytest.mark.parametrize("num, kind, uri, base16, base62, raw", CONV_VALID)
def test_to_uri(num, kind, uri, base16, base62, raw):
    assert SpotifyId(num, kind).to_uri() == uri


@pytest.mark.parametrize("num, kind, uri, base16, base62, raw", CONV_VALID)
def test_from_raw(num, kind, uri, base16, base62, raw):
    assert SpotifyId.from_raw(raw).id == num


@pytest.mark.parametrize("uri, base16, base62, raw", CONV_INVALID)
def test_from_raw_invalid(uri, base16, base62, raw):
    with pytest.raises(SpotifyIdError):
        SpotifyId.from_raw(raw)


@pytest.mark.parametrize("num, kind, uri, base16, base62, raw", CONV_VALID)
def test_to_raw(num, kind, uri, base16, base62, raw):
    assert SpotifyId(num, kind).to_raw() == raw


def test_from_raw_defaults_to_track():
    assert SpotifyId.from_raw(CONV_VALID[0][5]).audio_type is SpotifyAudioType.TRACK


@pytest.mark.parametrize("num", [0, 1, (1 << 128) - 1])
def test_encodings_round_trip_at_bounds(num):
    spotify_id = SpotifyId(num)
    assert len(spotify_id.to_base62()) == SpotifyId.SIZE_BASE62
    assert len(spotify_id.to_base16()) == SpotifyId.SIZE_BASE16
    assert SpotifyId.from_base62(spotify_id.to_base62()) == spotify_id
    assert SpotifyId.from_base16(spotify_id.to_base16()) == spotify_id
    assert SpotifyId.from_raw(spotify_id.to_raw()) == spotify_id
    assert SpotifyId.from_uri(spotify_id.to_uri()) == spotify_id


def test_id_out_of_range_rejected():
    with pytest.raises(SpotifyIdError):
        SpotifyId(1 << 128)


def test_base62_overflow_rejected():
    with pytest.raises(SpotifyIdError):
        SpotifyId.from_base62("Z" * 23)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("track", SpotifyAudioType.TRACK),
        ("episode", SpotifyAudioType.PODCAST),
        ("playlist", SpotifyAudioType.NON_PLAYABLE),
    ],
)
def test_audio_type_from_name(name, expected):
    assert SpotifyAudioType.from_name(name) is expected


def test_arbitrary_uri_type_is_non_playable():
    base62 = CONV_VALID[0][4]
    parsed = SpotifyId.from_uri(f"spotify:playlist:{base62}")
    assert parsed.audio_type is SpotifyAudioType.NON_PLAYABLE
    assert parsed.to_uri() == f"spotify:unknown:{base62}"


def test_file_id_base16_round_trip():
    hex_text = "b39fe8081e1f4c54be38e8d6f9f12bb99a1b1cfb"
    file_id = FileId(bytes.fromhex(hex_text))
    assert file_id.to_base16() == hex_text
    assert str(file_id) == hex_text


def test_file_id_ordering_follows_bytes():
    low = FileId(bytes(20))
    high = FileId(bytes([1]) + bytes(19))
    assert low < high
    assert sorted([high, low]) == [low, high]


def test_file_id_wrong_length_rejected():
    with pytest.raises(ValueError):
        FileId(bytes(19))