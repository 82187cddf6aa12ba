from model.patch import BANK_SIZE, OPERATOR_COUNT, FmOperator, FmPatch, PatchBank

def test_patch_creation():
    p = FmPatch(name="BRASS 1")
    assert p.name == "BRASS 1"
    assert len(p.operators) == OPERATOR_COUNT
    assert p.algorithm == 1
    assert p.is_complete()

def test_display_name_prefers_voice_name():
    assert FmPatch(name="slot 3", voice_name="E.PIANO 1").display_name == "E.PIANO 1"
    assert FmPatch(name="slot 3").display_name == "slot 3"

def test_incomplete_patch():
    assert not FmPatch(name="Broken", operators=[FmOperator()] * 5).is_complete()
    assert not FmPatch(name="Broken", operators=[None] * 6).is_complete()

def test_bank_holds_patches():
    bank = PatchBank("ROM1A", [FmPatch(name=f"P{i}") for i in range(BANK_SIZE)])
    assert len(bank.patches) == BANK_SIZE
    assert bank.patches[31].name == "P31"

def test_bank_copy_is_deep():
    bank = PatchBank("ROM1A", [FmPatch(name="P0")])
    copied = bank.copy()
    copied[0].operators[0].output_level = 10
    assert bank.patches[0].operators[0].output_level == 99
