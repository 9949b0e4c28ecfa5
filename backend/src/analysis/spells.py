from enum import Enum
from typing import Dict, Optional


class SpellCategory(str, Enum):
    ROTATIONAL = "rotational"
    ROTATIONAL_AOE = "rotational_aoe"
    COOLDOWNS = "cooldowns"
    DEFENSIVE = "defensive"
    UTILITY = "utility"
    OTHER = "other"


class SpellInfo:
    def __init__(
        self,
        spell_id,
        name,
        icon=None,
        cooldown=None,
        cost=None,
        category=SpellCategory.OTHER,
    ):
        self.id = spell_id
        self.name = name
        self.icon = icon
        # seconds, as published in the game data
        self.cooldown_ms = int(cooldown * 1000) if cooldown is not None else None
        self.cost: Dict[str, int] = dict(cost or {})
        self.category = category

    def get_cost(self, resource) -> Optional[int]:
        return self.cost.get(resource)

    def __repr__(self):
        return f"SpellInfo({self.id}, {self.name!r})"


_C = SpellCategory

SPELLS = {
    # Enhancement shaman
    "FURY_OF_AIR_TALENT": SpellInfo(
        197211, "Fury of Air", "ability_ironmaidens_swirlingvortex",
        cost={"maelstrom": 3}, category=_C.ROTATIONAL,
    ),
    "STORMSTRIKE": SpellInfo(17364, "Stormstrike", "ability_shaman_stormstrike", cooldown=9, category=_C.ROTATIONAL),
    "CRASH_LIGHTNING": SpellInfo(187874, "Crash Lightning", "spell_shaman_crashlightning", cooldown=6, category=_C.ROTATIONAL),
    "FLAMETONGUE": SpellInfo(193796, "Flametongue", "ability_skyreach_flash_bang", cooldown=12, category=_C.ROTATIONAL),
    "ROCKBITER": SpellInfo(193786, "Rockbiter", "spell_nature_rockbiter", category=_C.ROTATIONAL),
    "LAVA_LASH": SpellInfo(60103, "Lava Lash", "ability_shaman_lavalash", category=_C.ROTATIONAL),
    "FERAL_SPIRIT": SpellInfo(51533, "Feral Spirit", "spell_shaman_feralspirit", cooldown=120, category=_C.COOLDOWNS),
    "ASCENDANCE_TALENT_ENHANCEMENT": SpellInfo(114051, "Ascendance", "spell_fire_elementaldevastation", cooldown=180, category=_C.COOLDOWNS),
    "ASTRAL_SHIFT": SpellInfo(108271, "Astral Shift", "ability_shaman_astralshift", cooldown=90, category=_C.DEFENSIVE),
    "WIND_SHEAR": SpellInfo(57994, "Wind Shear", "spell_nature_cyclone", cooldown=12, category=_C.UTILITY),
    "STORMBRINGER_BUFF": SpellInfo(201846, "Stormbringer", "spell_nature_stormreach"),
    # Affliction warlock
    "UNSTABLE_AFFLICTION_CAST": SpellInfo(30108, "Unstable Affliction", "spell_shadow_unstableaffliction_3", category=_C.ROTATIONAL),
    "DEATHBOLT_TALENT": SpellInfo(264106, "Deathbolt", "inv_artifact_ulthalesh", cooldown=30, category=_C.ROTATIONAL),
    "HAUNT_TALENT": SpellInfo(48181, "Haunt", "ability_warlock_haunt", cooldown=15, category=_C.ROTATIONAL),
    "AGONY": SpellInfo(980, "Agony", "spell_shadow_curseofsargeras", category=_C.ROTATIONAL),
    "CORRUPTION_CAST": SpellInfo(172, "Corruption", "spell_shadow_abominationexplosion", category=_C.ROTATIONAL),
    "CORRUPTION_DEBUFF": SpellInfo(146739, "Corruption", "spell_shadow_abominationexplosion", category=_C.ROTATIONAL),
    "SIPHON_LIFE_TALENT": SpellInfo(63106, "Siphon Life", "spell_shadow_requiem", category=_C.ROTATIONAL),
    "SHADOW_BOLT_AFFLI": SpellInfo(232670, "Shadow Bolt", "spell_shadow_shadowbolt", category=_C.ROTATIONAL),
    "DRAIN_SOUL_TALENT": SpellInfo(198590, "Drain Soul", "spell_shadow_haunting", category=_C.ROTATIONAL),
    "PHANTOM_SINGULARITY_TALENT": SpellInfo(205179, "Phantom Singularity", "inv_enchant_voidsphere", cooldown=45, category=_C.ROTATIONAL_AOE),
    "SEED_OF_CORRUPTION_DEBUFF": SpellInfo(27243, "Seed of Corruption", "spell_shadow_seedofdestruction", category=_C.ROTATIONAL_AOE),
    "VILE_TAINT_TALENT": SpellInfo(278350, "Vile Taint", "sha_spell_shadow_shadesofdarkness_nightborne", cooldown=20, category=_C.ROTATIONAL_AOE),
    "SUMMON_DARKGLARE": SpellInfo(205180, "Summon Darkglare", "inv_beholderwarlock", cooldown=180, category=_C.COOLDOWNS),
    "DARK_SOUL_MISERY_TALENT": SpellInfo(113860, "Dark Soul: Misery", "spell_warlock_soulburn", cooldown=120, category=_C.COOLDOWNS),
    "UNENDING_RESOLVE": SpellInfo(104773, "Unending Resolve", "spell_shadow_demonictactics", cooldown=180, category=_C.DEFENSIVE),
    "DARK_PACT_TALENT": SpellInfo(108416, "Dark Pact", "spell_shadow_deathpact", cooldown=60, category=_C.DEFENSIVE),
    "BURNING_RUSH_TALENT": SpellInfo(111400, "Burning Rush", "ability_deathwing_sealarmorbreachtga", category=_C.UTILITY),
    "DRAIN_LIFE": SpellInfo(234153, "Drain Life", "spell_shadow_lifedrain02", category=_C.UTILITY),
    "MORTAL_COIL_TALENT": SpellInfo(6789, "Mortal Coil", "ability_warlock_mortalcoil", cooldown=45, category=_C.UTILITY),
    "DEMONIC_CIRCLE_TALENT": SpellInfo(268358, "Demonic Circle", "spell_shadow_demoniccirclesummon", category=_C.UTILITY),
    "DEMONIC_CIRCLE_SUMMON": SpellInfo(48018, "Demonic Circle", "spell_shadow_demoniccirclesummon", cooldown=10, category=_C.UTILITY),
    "DEMONIC_CIRCLE_TELEPORT": SpellInfo(48020, "Demonic Circle: Teleport", "spell_shadow_demoniccircleteleport", cooldown=30, category=_C.UTILITY),
    "DEMONIC_GATEWAY_CAST": SpellInfo(111771, "Demonic Gateway", "spell_warlock_demonicportal_green", cooldown=10, category=_C.UTILITY),
    "GRIMOIRE_OF_SACRIFICE_TALENT": SpellInfo(108503, "Grimoire of Sacrifice", "warlock_grimoireofsacrifice", cooldown=30, category=_C.UTILITY),
    "SHADOWFURY": SpellInfo(30283, "Shadowfury", "ability_warlock_shadowfurytga", cooldown=60, category=_C.UTILITY),
    "DARKFURY_TALENT": SpellInfo(264874, "Darkfury", "ability_warlock_shadowfurytga", category=_C.UTILITY),
    "SUMMON_IMP": SpellInfo(688, "Summon Imp", "spell_shadow_summonimp", category=_C.UTILITY),
    "SUMMON_VOIDWALKER": SpellInfo(697, "Summon Voidwalker", "spell_shadow_summonvoidwalker", category=_C.UTILITY),
    "SUMMON_SUCCUBUS": SpellInfo(712, "Summon Succubus", "spell_shadow_summonsuccubus", category=_C.UTILITY),
    "SUMMON_FELHUNTER": SpellInfo(691, "Summon Felhunter", "spell_shadow_summonfelhunter", category=_C.UTILITY),
}

SPELLS_BY_ID = {spell.id: spell for spell in SPELLS.values()}
