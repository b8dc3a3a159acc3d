import pytest

# ICAO 9303 specimen documents (Utopia, ERIKSSON ANNA MARIA)
TD3_LINE1 = "P<UTOERIKSSON<<ANNA<MARIA<<<<<<<<<<<<<<<<<<<"
TD3_LINE2 = "L898902C<3UTO6908061F9406236ZE184226B<<<<<14"
TD2_LINE1 = "I<UTOERIKSSON<<ANNA<MARIA<<<<<<<<<<<"
TD2_LINE2 = "D231458907UTO7408122F1204159<<<<<<<6"
TD1_LINE1 = "I<UTOD231458907<<<<<<<<<<<<<<<"
TD1_LINE2 = "7408122F1204159UTO<<<<<<<<<<<6"
TD1_LINE3 = "ERIKSSON<<ANNA<MARIA<<<<<<<<<<"


@pytest.fixture
def td3_text():
    return f"{TD3_LINE1}\n{TD3_LINE2}"


@pytest.fixture
def td2_text():
    return f"{TD2_LINE1}\n{TD2_LINE2}"


@pytest.fixture
def td1_text():
    return f"{TD1_LINE1}\n{TD1_LINE2}\n{TD1_LINE3}"
