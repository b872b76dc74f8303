from scaffolt.pipeline import main

main()
