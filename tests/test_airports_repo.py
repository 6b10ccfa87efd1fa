from flightrisk.data.airports_repo import AirportsRepo, airports_repo


def test_lookup_is_case_insensitive():
    assert airports_repo.get(" svo ").name == "Sheremetyevo"
    assert airports_repo.get("XXX") is None


def test_every_airport_sits_in_its_region_box():
    for a in airports_repo.all():
        region = airports_repo.get_region(a.region)
        assert region is not None, a.id
        assert region.contains(a.lat, a.lon), a.id


def test_regions_for_route():
    svo, vvo = airports_repo.get("SVO"), airports_repo.get("VVO")
    assert [r.id for r in airports_repo.regions_for(svo, vvo)] == ["central", "far_east"]
    assert [r.id for r in airports_repo.regions_for(svo, airports_repo.get("DME"))] == ["central"]


def test_loads_once(tmp_path):
    csv_path = tmp_path / "airports.csv"
    csv_path.write_text("id,name,city,lat,lon,region\nabc,Test,Town,1.5,2.5,\n", encoding="utf-8")
    repo = AirportsRepo(airports_path=csv_path, regions_path=tmp_path / "missing.csv")
    assert repo.get("ABC").region is None
    csv_path.write_text("id,name,city,lat,lon,region\n", encoding="utf-8")
    assert [a.id for a in repo.all()] == ["ABC"]
    assert repo.regions() == []
